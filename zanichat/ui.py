# Run from project root: streamlit run zanichat/ui.py
# UI talks to backend API (GET/POST /channels/{id}/messages, GET /messages/{id}/answer, POST /attachments).
# Markup comes pre-rendered from the server; this page only lays it out.

import os
import time

import streamlit as st
import requests

# Backend config
API_BASE = os.environ.get("API_BASE", "http://localhost:8000")
ANSWER_POLL_SECONDS = 1.5

st.title("zanichat")

channel_id = st.sidebar.text_input("Channel", value="general", key="channel_id").strip() or "general"
user_id = st.sidebar.text_input("User id", value="u1", key="user_id").strip() or "u1"
username = st.sidebar.text_input("Display name", value="You", key="username").strip()

# Register a file so 📎 lines resolve to it
with st.sidebar.expander("Register a file"):
    file_name = st.text_input("File name", key="att_name")
    file_url = st.text_input("URL", key="att_url")
    file_size = st.number_input("Size (bytes)", min_value=0, value=0, step=1, key="att_size")
    if st.button("Register", key="att_register", disabled=not (file_name and file_url)):
        try:
            r = requests.post(
                f"{API_BASE}/attachments",
                json={"name": file_name, "url": file_url, "size_bytes": int(file_size) or None},
                timeout=10,
            )
            if r.ok:
                st.success(f"Registered {file_name}")
            else:
                st.error(f"Failed: {r.status_code}: {r.text[:200]}")
        except requests.RequestException as e:
            st.error(f"Request failed: {e}")


def _format_size(size: int | None) -> str:
    if size is None:
        return "size unknown"
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


try:
    r = requests.get(f"{API_BASE}/channels/{channel_id}/messages", timeout=10)
    rendered = r.json() if r.ok else []
    if not r.ok:
        st.caption(f"Could not load messages: {r.status_code}")
except requests.RequestException:
    rendered = []
    st.caption("Backend not reachable. Start the API first.")

pending = False
for item in rendered:
    message = item.get("message") or {}
    formatted = item.get("formatted") or {}
    answer = item.get("answer") or {}
    with st.chat_message("user"):
        pin_mark = " · 📌" if message.get("is_pinned") else ""
        st.caption(f"{message.get('username') or message.get('user_id', '')} · {item.get('timestamp_label', '')}{pin_mark}")
        st.markdown(formatted.get("markup", ""), unsafe_allow_html=True)
        for att in formatted.get("attachments") or []:
            st.markdown(
                f"📎 [{att.get('name')}]({att.get('url')}) · {att.get('mime_type')} · {_format_size(att.get('size_bytes'))}"
            )
    if answer.get("status") == "answered":
        with st.chat_message("assistant"):
            st.markdown(answer.get("text") or "")
    elif answer.get("status") == "pending":
        pending = True
        with st.chat_message("assistant"):
            st.caption("Thinking...")

if prompt := st.chat_input("Message the channel (mention @zani to ask the assistant)"):
    try:
        r = requests.post(
            f"{API_BASE}/channels/{channel_id}/messages",
            json={"user_id": user_id, "username": username, "content": prompt},
            timeout=10,
        )
        if not r.ok:
            st.error(f"Send failed: {r.status_code}: {r.text[:200]}")
    except requests.RequestException as e:
        st.error(f"Send failed: {e}")
    st.rerun()
elif pending:
    # Poll until pending answers resolve
    time.sleep(ANSWER_POLL_SECONDS)
    st.rerun()
