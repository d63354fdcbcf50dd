from __future__ import annotations

import curses
from dataclasses import dataclass


@dataclass(frozen=True)
class Keybindings:
    QUIT = (ord("q"), ord("Q"), 27)  # 27 = Esc
    CONFIRM = (curses.KEY_ENTER, ord("\n"), ord("\r"))
    CANCEL = (27,)
    RESIZE = (curses.KEY_RESIZE,)

    NAV_UP = (curses.KEY_UP, ord("k"))
    NAV_DOWN = (curses.KEY_DOWN, ord("j"))
    PAGE_UP = (curses.KEY_PPAGE,)
    PAGE_DOWN = (curses.KEY_NPAGE,)
    HOME = (curses.KEY_HOME, ord("g"))
    END = (curses.KEY_END, ord("G"))

    TOGGLE_SELECT = (ord(" "),)
    ADD = (ord("a"), ord("A"))
    DELETE = (ord("d"), ord("D"))
    UPDATE = (ord("u"), ord("U"))
    ACTIVATE = (ord("r"), curses.KEY_ENTER, ord("\n"), ord("\r"))
    REFRESH = (ord("R"),)
    SET_FILTER = (ord("f"), ord("F"))
    CLEAR_FILTER = (ord("l"), ord("L"))
    TOGGLE_FOOTER = (ord("?"), ord("/"))

    # Only active while the footer is expanded.
    CONFIG = (ord("c"), ord("C"))
    STOP = (ord("s"), ord("S"))
    RESTART = (ord("e"), ord("E"))
    INSTALL = (ord("i"), ord("I"))

    YES = (ord("y"), ord("Y"))
    NO = (ord("n"), ord("N"))


KEYS = Keybindings()
