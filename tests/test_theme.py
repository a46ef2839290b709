"""Theme and static page content checks."""
from mentesegura.ui import content
from mentesegura.ui.theme import THEME, generate_css, get_theme


def test_accent_overrides_do_not_touch_defaults():
    theme = get_theme(primary="#111111")
    assert theme["primary"] == "#111111"
    assert theme["secondary"] == THEME["secondary"]
    assert THEME["primary"] != "#111111"


def test_css_has_chat_bubble_classes():
    css = generate_css(get_theme())
    for cls in (".bubble-user", ".bubble-assistant", ".bubble-critical", ".bubble-failed", ".critical-banner"):
        assert cls in css
    assert THEME["destructive"] in css


def test_landing_and_dashboard_content():
    assert len(content.FEATURES) == 6
    assert all(len(feature) == 3 for feature in content.FEATURES)
    assert len(content.RESOURCES) == 5
    assert len(content.CARE_SECTIONS) == 3
    assert content.CARE_SECTIONS[-1][0] == "Onde posso buscar por ajuda?"
