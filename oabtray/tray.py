"""System tray icon and menu"""

import logging

import pystray
from PIL import Image, ImageDraw
from pystray import MenuItem as item

from .formatter import CURRENCY_SYMBOL, DOWN_INDICATOR, UP_INDICATOR

logger = logging.getLogger('OABTray.tray')

ICON_COLORS = {
    'up': ('#10B981', '#047857'),
    'down': ('#EF4444', '#B91C1C'),
    'flat': ('#6B7280', '#374151'),
}


def create_icon_image(state: str = 'flat', size: int = 64) -> Image.Image:
    """Round coin icon tinted by price direction"""
    fill, outline = ICON_COLORS.get(state, ICON_COLORS['flat'])
    image = Image.new('RGBA', (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    center = size // 2

    draw.ellipse([4, 4, size - 4, size - 4], fill=fill, outline=outline, width=2)

    bar_width = 4
    bar_height = 24
    bar_y = center - bar_height // 2
    draw.rectangle([center - 10, bar_y, center - 10 + bar_width, bar_y + bar_height], fill='white')
    draw.rectangle([center + 6, bar_y, center + 6 + bar_width, bar_y + bar_height], fill='white')
    draw.rectangle([center - 14, center - 6, center + 14, center - 2], fill='white')
    draw.rectangle([center - 14, center + 2, center + 14, center + 6], fill='white')
    return image


def get_title_state(title: str) -> str:
    if UP_INDICATOR in title:
        return 'up'
    if DOWN_INDICATOR in title:
        return 'down'
    return 'flat'


class TrayDisplay:
    """Tray surface: receives titles from the tracker and animator, owns the menu"""

    def __init__(self, version: str, sensitivity_choices=(0.5, 1.0, 2.5, 5.0)):
        self.version = version
        self.sensitivity_choices = list(sensitivity_choices)
        self.title = CURRENCY_SYMBOL
        self.tooltip = "Bitcoin Price Tracker"
        self.icon_state = 'flat'
        self.tracker = None
        self.icon = None

    # Display surface

    def set_title(self, text: str) -> None:
        self.title = text
        if not self.icon:
            return
        try:
            self.icon.title = text
            state = get_title_state(text)
            # animation frames keep the current tint
            if text.startswith(CURRENCY_SYMBOL) and state != self.icon_state:
                self.icon_state = state
                self.icon.icon = create_icon_image(state)
            self.icon.update_menu()
        except Exception as e:
            logger.warning(f"Tray title update failed: {e}")

    def set_tooltip(self, text: str) -> None:
        self.tooltip = text
        if not self.icon:
            return
        try:
            self.icon.update_menu()
        except Exception as e:
            logger.warning(f"Tray menu update failed: {e}")

    # Menu

    def _is_current_sensitivity(self, value: float) -> bool:
        if not self.tracker:
            return False
        _, preferences = self.tracker.state.read()
        return preferences.sensitivity_factor == value

    def _is_abbreviated(self) -> bool:
        if not self.tracker:
            return False
        _, preferences = self.tracker.state.read()
        return preferences.abbreviated_display

    def on_select_sensitivity(self, value: float) -> None:
        if self.tracker:
            self.tracker.set_sensitivity_factor(value)

    def on_toggle_millions(self) -> None:
        if self.tracker:
            self.tracker.toggle_abbreviated_display()

    def on_quit(self) -> None:
        logger.info("Quit requested from tray")
        if self.icon:
            self.icon.stop()

    def _sensitivity_action(self, value: float):
        # pystray only accepts actions taking at most (icon, item)
        return lambda icon, menu_item: self.on_select_sensitivity(value)

    def _sensitivity_checked(self, value: float):
        return lambda menu_item: self._is_current_sensitivity(value)

    def build_menu(self) -> pystray.Menu:
        sensitivity_items = [
            item(f"{value:g}%",
                 self._sensitivity_action(value),
                 checked=self._sensitivity_checked(value),
                 radio=True)
            for value in self.sensitivity_choices
        ]
        return pystray.Menu(
            item(lambda menu_item: self.title, None, enabled=False),
            item(lambda menu_item: (self.tooltip.splitlines() or [''])[-1], None, enabled=False),
            pystray.Menu.SEPARATOR,
            item('Sensitivity', pystray.Menu(*sensitivity_items)),
            item('Set price in millions', lambda icon, menu_item: self.on_toggle_millions(),
                 checked=lambda menu_item: self._is_abbreviated()),
            pystray.Menu.SEPARATOR,
            item(f"Version: {self.version}", None, enabled=False),
            pystray.Menu.SEPARATOR,
            item('Quit', lambda icon, menu_item: self.on_quit()),
        )

    def setup(self, tracker) -> None:
        self.tracker = tracker
        self.icon = pystray.Icon(
            "oabtray",
            create_icon_image(self.icon_state),
            self.title,
            menu=self.build_menu(),
        )
        logger.info("System tray configured successfully")

    def _on_ready(self, icon) -> None:
        icon.visible = True
        if self.tracker:
            self.tracker.refresh_display()
            self.tracker.start()

    def run(self) -> None:
        """Block in the tray event loop until Quit"""
        if not self.icon:
            raise RuntimeError("Tray not set up")
        self.icon.run(setup=self._on_ready)
