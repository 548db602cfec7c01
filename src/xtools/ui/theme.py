"""Terminal palette and CSS overrides for the web dashboard."""

from __future__ import annotations

COLORS = {
    "background": "#0d1117",
    "surface": "#161b22",
    "border": "#30363d",
    "text": "#e6edf3",
    "text_dim": "#484f58",
    "accent": "#58a6ff",
    "connected": "#3fb950",
    "tx": "#d29922",
    "rx": "#3fb950",
}

MONO_FONT = "'JetBrains Mono', 'Fira Code', Consolas, monospace"

CSS = f"""
body {{
    background-color: {COLORS["background"]} !important;
    color: {COLORS["text"]} !important;
    font-family: {MONO_FONT} !important;
}}
.q-card, .q-header {{
    background-color: {COLORS["surface"]} !important;
    border: 1px solid {COLORS["border"]} !important;
}}
.q-btn {{
    text-transform: none !important;
}}
.traffic-log {{
    background-color: {COLORS["background"]} !important;
    font-family: {MONO_FONT};
    white-space: pre-wrap;
    overflow-y: auto;
}}
"""
