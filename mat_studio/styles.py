from . import config_manager

THEME = (config_manager.CONFIG or {}).get('theme', {})


def get_stylesheet():
    return f"""
    /* === GLOBAL RESET === */
    QWidget {{
        font-family: '{THEME['font_family_ui']}', sans-serif;
        font-size: {THEME['font_size']};
        color: {THEME['text_header']};
    }}

    /* === MAIN WINDOW === */
    QMainWindow {{
        background-color: {THEME['window_bg']};
    }}

    /* === DOCK WIDGETS === */
    QDockWidget {{
        border: none;
    }}

    QDockWidget::title {{
        background: {THEME['panel_bg']};
        padding: 6px;
    }}

    /* === PANEL CONTENT === */
    QFrame#PanelContent {{
        background-color: {THEME['panel_bg']};
        border-bottom: 1px solid {THEME['border_color']};
    }}

    QLabel#SectionTitle {{
        color: {THEME['text_muted']};
        font-weight: bold;
        font-size: 10px;
    }}

    QLabel#Hint {{
        color: {THEME['text_muted']};
    }}

    /* === INPUTS === */
    QLineEdit, QSpinBox, QDoubleSpinBox, QComboBox {{
        background-color: {THEME['window_bg']};
        border: 1px solid {THEME['border_color']};
        border-radius: 4px;
        padding: 3px;
    }}

    QListWidget {{
        background-color: {THEME['window_bg']};
        border: 1px solid {THEME['border_color']};
    }}

    /* === BUTTONS === */
    QPushButton {{
        background-color: {THEME['btn_default']};
        color: {THEME['btn_text']};
        border-radius: 8px;
        padding: 6px;
        font-weight: 600;
        border: none;
    }}

    QPushButton:hover {{
        background-color: {THEME['btn_accent']};
        color: black;
    }}

    QPushButton#Danger:hover {{
        background-color: {THEME['danger']};
        color: white;
    }}
    """
