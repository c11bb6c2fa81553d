from __future__ import annotations
import streamlit as st

from auth.hashing import verify_password
from auth.session import is_admin, set_admin
from services.config import PresenceConfig
from views.router import goto


def render(config: PresenceConfig):
    # Si ya es admin, no tiene sentido quedarse aquí
    if is_admin():
        goto("admin_stats")

    st.markdown("## Acceso administrador")
    st.markdown(
        '<div class="muted">Permite ver las sesiones registradas y limpiar el registro.</div>',
        unsafe_allow_html=True
    )
    st.write("")

    if not config.admin_password_hash:
        st.warning("Panel deshabilitado: define ONLINE_ADMIN_PASSWORD_HASH (python -m auth.hashing <password>).")
        return

    st.session_state.setdefault("login_pass", "")
    password = st.text_input("Contraseña", type="password", placeholder="••••••••", key="login_pass")

    if st.button("Entrar", use_container_width=True):
        if not verify_password(password or "", config.admin_password_hash):
            st.error("Contraseña incorrecta.")
            st.stop()

        set_admin(True)
        # ✅ Redirección inmediata
        goto("admin_stats")
