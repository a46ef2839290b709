"""
Theme for Mente Segura: soft light palette with a purple-to-pink accent.
"""

THEME = {
    "bg_primary": "#faf7ff",
    "bg_card": "#ffffff",
    "bg_muted": "#f3effa",
    "text_primary": "#1f1633",
    "text_secondary": "#6b6280",
    "primary": "#8b5cf6",
    "secondary": "#ec4899",
    "border": "#e7e0f3",
    "destructive": "#dc2626",
    "destructive_soft": "rgba(220, 38, 38, 0.08)",
}


def get_theme(primary: str = None, secondary: str = None) -> dict:
    """Theme colors, with optional accent overrides from config."""
    theme = dict(THEME)
    if primary:
        theme["primary"] = primary
    if secondary:
        theme["secondary"] = secondary
    return theme


def generate_css(theme: dict) -> str:
    return f"""
body {{
    font-family: 'Inter', -apple-system, BlinkMacSystemFont, 'Segoe UI', 'Roboto', sans-serif;
    background: linear-gradient(135deg, {theme['bg_primary']} 0%, #fdf2f8 100%);
    color: {theme['text_primary']};
    -webkit-font-smoothing: antialiased;
}}

.gradient-text {{
    background: linear-gradient(90deg, {theme['primary']}, {theme['secondary']});
    -webkit-background-clip: text;
    background-clip: text;
    color: transparent;
}}

.gradient-bg {{
    background: linear-gradient(90deg, {theme['primary']}, {theme['secondary']}) !important;
    color: white !important;
}}

.feature-card {{
    background: {theme['bg_card']};
    border: 1px solid {theme['border']};
    border-radius: 16px;
    transition: box-shadow 0.3s ease;
}}

.feature-card:hover {{
    box-shadow: 0 8px 30px rgba(139, 92, 246, 0.18);
}}

.muted {{
    color: {theme['text_secondary']};
}}

.bubble {{
    max-width: 80%;
    border-radius: 16px;
    padding: 12px 16px;
    white-space: pre-wrap;
}}

.bubble-user {{
    background: linear-gradient(90deg, {theme['primary']}, {theme['secondary']});
    color: white;
}}

.bubble-assistant {{
    background: {theme['bg_muted']};
    color: {theme['text_primary']};
}}

.bubble-critical {{
    background: {theme['destructive_soft']};
    border: 2px solid {theme['destructive']};
    color: {theme['text_primary']};
}}

.bubble-failed {{
    opacity: 0.7;
    border: 1px dashed {theme['destructive']};
}}

.critical-banner {{
    color: {theme['destructive']};
    font-weight: 600;
    font-size: 0.85rem;
}}

@keyframes float {{
    0%, 100% {{ transform: translateY(0); }}
    50% {{ transform: translateY(-10px); }}
}}

.animate-float {{
    animation: float 6s ease-in-out infinite;
}}
"""
