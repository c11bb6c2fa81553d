from __future__ import annotations
import streamlit as st

def goto(route: str):
    st.session_state["route"] = route
    st.rerun()

def current_route(default: str = "home") -> str:
    return st.session_state.get("route", default)
