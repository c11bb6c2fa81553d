from __future__ import annotations
import streamlit as st

from auth.session import get_session_id
from services.presence import PresenceRegistry


def render(registry: PresenceRegistry):
    st.markdown("## ¿Quién está en línea?")
    st.markdown(
        '<div class="muted">Cada visita a esta página marca tu sesión como activa.</div>',
        unsafe_allow_html=True
    )
    st.write("")

    sid = get_session_id()
    online = registry.count()
    minutes = registry.inactivity_threshold // 60

    c1, c2 = st.columns(2)
    c1.metric("Sesiones en línea", online)
    c2.metric("Inactividad máxima", f"{minutes} min" if minutes else f"{registry.inactivity_threshold} s")

    if sid and registry.check(sid):
        st.success("✅ Estás en línea.")
        st.caption(f"Tu sesión: {sid[:8]}…")
    else:
        st.info("Tu sesión aún no está registrada.")

    if st.button("🔄 Actualizar", use_container_width=True):
        st.rerun()
