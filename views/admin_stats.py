from __future__ import annotations
from datetime import datetime, timezone
import streamlit as st
import pandas as pd

from auth.guards import require_admin
from services.presence import PresenceRecord, PresenceRegistry


def records_frame(registry: PresenceRegistry, records: list[PresenceRecord]) -> pd.DataFrame:
    """Tabla para el panel: una fila por sesión, la más reciente primero."""
    now = registry.now()
    rows = []
    for r in records:
        rows.append({
            "Sesión": r.session_id[:8] + "…" if len(r.session_id) > 8 else r.session_id,
            "Última visita (UTC)": datetime.fromtimestamp(r.last_seen, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
            "Inactiva (s)": registry.seconds_since(r, now),
            "En línea": not registry.is_stale(r, now),
        })
    return pd.DataFrame(rows, columns=["Sesión", "Última visita (UTC)", "Inactiva (s)", "En línea"])


def render(registry: PresenceRegistry):
    if not require_admin():
        return

    st.markdown("## 📊 Sesiones registradas")
    st.markdown(
        f'<div class="muted">Una sesión pasa a offline tras {registry.inactivity_threshold} s sin actividad.</div>',
        unsafe_allow_html=True
    )
    st.write("")

    records = registry.records()
    df = records_frame(registry, records)

    online = int(df["En línea"].sum()) if not df.empty else 0
    c1, c2, c3 = st.columns(3)
    c1.metric("Registros", len(df))
    c2.metric("En línea", online)
    c3.metric("Inactivas", len(df) - online)
    st.divider()

    if df.empty:
        st.info("No hay sesiones registradas.")
    else:
        st.dataframe(df, use_container_width=True, hide_index=True)

    st.write("")
    b1, b2 = st.columns(2)
    with b1:
        if st.button("🧹 Limpiar inactivas", use_container_width=True):
            if registry.auto_clean():
                st.success("Sesiones inactivas eliminadas.")
            else:
                st.info("No había nada que limpiar.")
    with b2:
        with st.popover("🗑️ Vaciar registro", use_container_width=True):
            st.caption("Borra todas las sesiones, también las activas.")
            if st.button("Confirmar", key="btn_drop", use_container_width=True):
                if registry.drop():
                    st.success("Registro eliminado.")
                else:
                    st.info("El registro ya estaba vacío.")
