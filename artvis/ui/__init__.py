"""Streamlit application shell."""

from __future__ import annotations


def render_app() -> None:
    import streamlit as st

    # set_page_config() must run before any other streamlit command
    st.set_page_config(page_title="Artist Collaboration Network", layout="wide")

    from artvis.config import APP_FONTS
    from artvis.ui.sidebar import init_session_state, render_sidebar
    from artvis.ui.tabs import render_tabs

    st.markdown(
        f"""
        <style>
        @import url('https://fonts.googleapis.com/css2?family=Fraunces:opsz,wght@9..144,500;9..144,700&family=IBM+Plex+Sans:wght@400;500;600;700&family=IBM+Plex+Mono:wght@400;500&display=swap');
        :root {{
            --ink-1: #0F1419;
            --ink-3: #5F6D7D;
            --accent-1: #0054A4;
            --font-display: '{APP_FONTS["display"]}', serif;
            --font-body: '{APP_FONTS["body"]}', sans-serif;
            --font-mono: '{APP_FONTS["mono"]}', monospace;
        }}
        html, body, [class*="css"] {{
            font-family: var(--font-body);
            color: var(--ink-1);
        }}
        h1, h2, h3 {{
            font-family: var(--font-display);
            color: var(--accent-1);
        }}
        code, pre {{
            font-family: var(--font-mono);
        }}
        .legend-card {{
            background: #FFFFFF;
            border: 1px solid rgba(30, 42, 53, 0.1);
            border-radius: 10px;
            padding: 0.75rem 1rem;
        }}
        .legend-title {{
            font-weight: 600;
            color: var(--ink-3);
            margin-bottom: 0.4rem;
        }}
        .legend-grid {{
            display: grid;
            grid-template-columns: repeat(auto-fill, minmax(150px, 1fr));
            gap: 0.35rem 0.75rem;
        }}
        .legend-item {{
            display: flex;
            align-items: center;
            gap: 0.45rem;
            font-size: 0.85rem;
        }}
        .legend-swatch {{
            width: 12px;
            height: 12px;
            border-radius: 50%;
            display: inline-block;
        }}
        </style>
        """,
        unsafe_allow_html=True,
    )

    init_session_state()
    state = render_sidebar()
    render_tabs(state)
