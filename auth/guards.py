from __future__ import annotations
import streamlit as st
from auth.session import is_admin

def require_admin() -> bool:
    if not is_admin():
        st.warning("Debes iniciar sesión como administrador para acceder aquí.")
        return False
    return True
