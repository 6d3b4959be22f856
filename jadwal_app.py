#!/usr/bin/env python3
"""
Jadwal Sholat desktop widget
Always-on-top window showing:
  - Location and date of the last fetched schedule
  - The five daily prayer times, next prayer highlighted
  - Live countdown to the next prayer
  - Works offline from the last stored schedule
"""

import logging
import threading
import tkinter as tk
from tkinter import messagebox

from jadwal.config import Config
from jadwal.countdown import CountdownEngine
from jadwal.errors import FetchError
from jadwal.notifier import ReminderScheduler
from jadwal.schedule import PLACEHOLDER, PRAYER_NAMES
from jadwal.service import PrayerService

log = logging.getLogger(__name__)

# ──────────────────────────────────────────────────────────────────────────────
# Theme constants
# ──────────────────────────────────────────────────────────────────────────────
BG_MAIN = "#f3f4f6"
BG_HERO = "#fef9c3"
BG_ROW = "#ffffff"
BG_ACTIVE = "#ccfbf1"
ACCENT_TEAL = "#2dd4bf"
TEXT_DARK = "#1f2937"
TEXT_DIM = "#9ca3af"

FONT_SM = ("Helvetica", 9)
FONT_MD = ("Helvetica", 12)
FONT_MD_BOLD = ("Helvetica", 12, "bold")
FONT_LG = ("Helvetica", 16, "bold")
FONT_TIMER = ("Helvetica", 36, "bold")

WINDOW_W = 360
WINDOW_H = 560

PRAYER_ICON = {"Subuh": "🌅", "Magrib": "🌇", "Isya": "🌙"}


class TkScheduler:
    """Countdown scheduler backed by the Tk event loop (`after`)."""

    def __init__(self, root: tk.Tk):
        self.root = root

    def call_later(self, delay: float, callback):
        return _AfterHandle(self.root, self.root.after(int(delay * 1000), callback))


class _AfterHandle:
    def __init__(self, root, after_id):
        self.root = root
        self.after_id = after_id

    def cancel(self):
        self.root.after_cancel(self.after_id)


# ──────────────────────────────────────────────────────────────────────────────
# Main App
# ──────────────────────────────────────────────────────────────────────────────
class JadwalApp:
    def __init__(self, root: tk.Tk):
        self.root = root
        self._loading = False
        self.prayer_rows = {}

        engine = CountdownEngine(scheduler=TkScheduler(root), on_tick=self._on_tick)
        reminders = ReminderScheduler(callback=self._on_notification)
        self.service = PrayerService(engine=engine, reminders=reminders)
        engine.now_provider = self.service.now

        self._setup_window()
        self._build_ui()
        self._start()

    def _setup_window(self):
        root = self.root
        root.title("Jadwal Sholat")
        root.configure(bg=BG_MAIN)
        root.resizable(False, False)
        root.attributes("-topmost", True)
        x = root.winfo_screenwidth() - WINDOW_W - 40
        y = (root.winfo_screenheight() - WINDOW_H) // 2
        root.geometry(f"{WINDOW_W}x{WINDOW_H}+{x}+{y}")
        root.protocol("WM_DELETE_WINDOW", self._on_close)

    # ──────────────────────────────────────────────────────────────────────
    # UI construction
    # ──────────────────────────────────────────────────────────────────────
    def _build_ui(self):
        header = tk.Frame(self.root, bg=BG_MAIN)
        header.pack(fill=tk.X, padx=16, pady=(16, 8))

        self.lbl_location = tk.Label(header, text="📍 Mencari Lokasi...", font=FONT_LG, fg=TEXT_DARK, bg=BG_MAIN, anchor="w")
        self.lbl_location.pack(fill=tk.X)
        self.lbl_date = tk.Label(header, text="-", font=FONT_SM, fg=TEXT_DIM, bg=BG_MAIN, anchor="w")
        self.lbl_date.pack(fill=tk.X)

        hero = tk.Frame(self.root, bg=BG_HERO, pady=14)
        hero.pack(fill=tk.X, padx=16, pady=8)
        self.lbl_next_name = tk.Label(hero, text="Next up: -", font=FONT_MD_BOLD, fg=TEXT_DARK, bg=BG_HERO)
        self.lbl_next_name.pack()
        self.lbl_countdown = tk.Label(hero, text=PLACEHOLDER, font=FONT_TIMER, fg=TEXT_DARK, bg=BG_HERO)
        self.lbl_countdown.pack()

        self.prayer_frame = tk.Frame(self.root, bg=BG_MAIN)
        self.prayer_frame.pack(fill=tk.X, padx=16)
        self._build_prayer_rows()

        self.lbl_status = tk.Label(
            self.root, text="Data jadwal belum dimuat.", font=FONT_SM, fg=TEXT_DIM, bg=BG_MAIN,
        )
        self.lbl_status.pack(pady=(6, 0))

        footer = tk.Frame(self.root, bg=BG_MAIN)
        footer.pack(fill=tk.X, side=tk.BOTTOM, padx=16, pady=12)

        self.notif_var = tk.BooleanVar(value=self.service.notifications_enabled)
        tk.Checkbutton(
            footer, text="Aktifkan Pengingat Sholat", variable=self.notif_var,
            font=FONT_SM, bg=BG_MAIN, activebackground=BG_MAIN,
            command=self._toggle_notifications,
        ).pack(side=tk.LEFT)

        self.btn_refresh = tk.Button(
            footer, text="Gunakan Lokasi Saya", font=FONT_SM, fg="white", bg=ACCENT_TEAL,
            activebackground=ACCENT_TEAL, bd=0, cursor="hand2", command=self._reload_data,
        )
        self.btn_refresh.pack(side=tk.RIGHT)

    def _build_prayer_rows(self):
        for name in PRAYER_NAMES:
            row = tk.Frame(self.prayer_frame, bg=BG_ROW, pady=6)
            row.pack(fill=tk.X, pady=2)
            icon = PRAYER_ICON.get(name, "☀️")
            lbl_name = tk.Label(row, text=f" {icon}  {name}", font=FONT_MD, fg=TEXT_DARK, bg=BG_ROW, anchor="w")
            lbl_name.pack(side=tk.LEFT, padx=6)
            lbl_time = tk.Label(row, text="--:--", font=FONT_MD_BOLD, fg=TEXT_DARK, bg=BG_ROW, anchor="e")
            lbl_time.pack(side=tk.RIGHT, padx=6)
            self.prayer_rows[name] = {"row": row, "lbl_name": lbl_name, "lbl_time": lbl_time}

    # ──────────────────────────────────────────────────────────────────────
    # Data loading
    # ──────────────────────────────────────────────────────────────────────
    def _start(self):
        snapshot = self.service.restore()
        if snapshot is not None:
            self._show_snapshot(snapshot)
            self.lbl_status.config(text="Offline mode. Times from last sync.")
            self.btn_refresh.config(text="Perbarui Jadwal")
        else:
            self._reload_data()

    def _reload_data(self):
        if self._loading:
            return
        self._loading = True
        self.btn_refresh.config(state=tk.DISABLED)
        t = threading.Thread(target=self._load_data, daemon=True)
        t.start()

    def _load_data(self):
        """Fetch location + prayer times in background thread."""
        try:
            snapshot = self.service.fetch_snapshot()
        except FetchError as exc:
            message = str(exc)
            self.root.after(0, lambda: self._on_data_error(message))
            return
        except Exception as exc:
            log.exception("Unexpected error while loading prayer schedule")
            message = str(exc) or type(exc).__name__
            self.root.after(0, lambda: self._on_data_error(message))
            return
        self.root.after(0, lambda: self._on_data_loaded(snapshot))

    def _on_data_loaded(self, snapshot):
        """Called in main thread once data is ready."""
        self._loading = False
        self.btn_refresh.config(state=tk.NORMAL, text="Perbarui Jadwal")
        self.service.apply(snapshot)
        self._show_snapshot(snapshot)
        self.lbl_status.config(text="Jadwal diperbarui.")

    def _on_data_error(self, message: str):
        self._loading = False
        self.btn_refresh.config(state=tk.NORMAL)
        if self.service.has_schedule:
            self.lbl_status.config(text="Offline mode. Times from last sync.")
        messagebox.showerror("Gagal", f"Jadwal tidak dapat dimuat.\n{message}")

    def _show_snapshot(self, snapshot):
        self.lbl_location.config(text=f"📍 {snapshot.city}")
        self.lbl_date.config(text=snapshot.date)
        for name in PRAYER_NAMES:
            self.prayer_rows[name]["lbl_time"].config(text=snapshot.timings[name])

    # ──────────────────────────────────────────────────────────────────────
    # Countdown + reminders
    # ──────────────────────────────────────────────────────────────────────
    def _on_tick(self, display: str, prayer_name: str):
        self.lbl_countdown.config(text=display)
        self.lbl_next_name.config(text=f"Next up: {prayer_name}")
        for name, widgets in self.prayer_rows.items():
            bg = BG_ACTIVE if name == prayer_name else BG_ROW
            font = FONT_MD_BOLD if name == prayer_name else FONT_MD
            widgets["row"].config(bg=bg)
            widgets["lbl_name"].config(bg=bg, font=font)
            widgets["lbl_time"].config(bg=bg)

    def _on_notification(self, title: str, message: str):
        """Called from a timer thread; schedule GUI update in main thread."""
        self.root.after(0, self.root.bell)

    def _toggle_notifications(self):
        self.service.set_notifications(self.notif_var.get())

    def _on_close(self):
        self.service.clear()
        self.root.destroy()


# ──────────────────────────────────────────────────────────────────────────────
# Entry point
# ──────────────────────────────────────────────────────────────────────────────
def main():
    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    root = tk.Tk()
    JadwalApp(root)
    root.mainloop()


if __name__ == "__main__":
    main()
