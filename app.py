from __future__ import annotations

import logging
import os
import streamlit as st

from auth.session import get_session_id, is_admin, logout
from services.config import PresenceConfig
from services.presence import PresenceRegistry
from views.router import current_route, goto
from views import home, login, admin_stats


APP_NAME = "¿Quién está en línea?"

logger = logging.getLogger(__name__)


def _setup_logging():
    logging.basicConfig(
        level=os.environ.get("ONLINE_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@st.cache_resource
def get_registry() -> PresenceRegistry:
    """Un registro por proceso; el estado real vive en el blob."""
    _setup_logging()
    config = PresenceConfig.from_env()
    logger.info(f"Registro de presencia en '{config.data_dir}/{config.blob_name}', inactividad {config.inactivity_threshold}s.")
    return PresenceRegistry.from_config(config)


def _inject_css():
    css_path = os.path.join("assets", "styles.css")
    if os.path.exists(css_path):
        with open(css_path, "r", encoding="utf-8") as f:
            st.markdown(f"<style>{f.read()}</style>", unsafe_allow_html=True)


def _topbar(registry: PresenceRegistry):
    route = st.session_state.get("route", "home")
    c1, c2, c3 = st.columns([3.0, 3, 1.2], vertical_alignment="center")

    with c1:
        st.markdown(
            f'<div class="brand"><span class="dot"></span> {APP_NAME}</div>',
            unsafe_allow_html=True
        )

    with c2:
        st.markdown(
            f'<div class="session">🟢 En línea: <b>{registry.count()}</b></div>',
            unsafe_allow_html=True
        )

    with c3:
        a1, a2 = st.columns([3, 1], vertical_alignment="center")
        with a1:
            if route != "home":
                if st.button("🏠", key="btn_top_home", help="Inicio", use_container_width=True):
                    goto("home")
        with a2:
            if not is_admin():
                if st.button("👤", key="btn_top_login", help="Administrador", use_container_width=True):
                    goto("login")
            else:
                with st.popover("👤", help="Cuenta"):
                    if st.button("📊 Sesiones", use_container_width=True, key="btn_admin_stats"):
                        goto("admin_stats")
                    st.divider()
                    if st.button("⎋ Cerrar sesión", use_container_width=True, key="btn_logout"):
                        logout()
                        goto("home")


def main():
    st.set_page_config(page_title=APP_NAME, page_icon="🟢", layout="wide")
    _inject_css()

    registry = get_registry()

    # ✅ Cada rerun cuenta como visita de esta sesión
    registry.heartbeat(get_session_id())

    # ?page=... solo se aplica una vez
    if "page" in st.query_params:
        st.session_state["route"] = st.query_params["page"]
        del st.query_params["page"]

    _topbar(registry)

    route = current_route("home")

    if route == "home":
        home.render(registry)
    elif route == "login":
        login.render(registry.config)
    elif route == "admin_stats":
        admin_stats.render(registry)
    else:
        goto("home")


if __name__ == "__main__":
    main()
