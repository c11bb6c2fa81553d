from __future__ import annotations
import uuid
from typing import Optional
import streamlit as st
from streamlit import runtime

SESSION_KEY = "presence_session_id"

def get_session_id() -> Optional[str]:
    """ID de la sesión del navegador; None si no corre dentro de Streamlit."""
    if not runtime.exists():
        return None
    if SESSION_KEY not in st.session_state:
        st.session_state[SESSION_KEY] = str(uuid.uuid4())
    return st.session_state[SESSION_KEY]

def is_admin() -> bool:
    return bool(st.session_state.get("presence_admin"))

def set_admin(value: bool) -> None:
    st.session_state["presence_admin"] = bool(value)

def logout() -> None:
    set_admin(False)
