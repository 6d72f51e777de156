"""
Buffon Needle Explorer — Main Application (UA)
1. Голка Бюффона: кидки, перетини, оцінка π у реальному часі.
2. Режим ставок: чи досягне оцінка потрібної точності за N кидків.
"""
import sys
import logging
import tkinter as tk
from tkinter import messagebox, BOTH, YES, LEFT, X, Y, DISABLED

# --- БЛОК 0: ПЕРЕВІРКА БІБЛІОТЕК ---
REQUIRED_LIBS = ['numpy', 'matplotlib', 'ttkbootstrap']

def check_libraries():
    missing = []
    for lib in REQUIRED_LIBS:
        try:
            __import__(lib)
        except ImportError:
            missing.append(lib)
    return missing

missing_libs = check_libraries()
if missing_libs:
    root = tk.Tk(); root.withdraw()
    tk.messagebox.showerror("Помилка", f"Відсутні бібліотеки: {', '.join(missing_libs)}")
    sys.exit(1)

import math
import numpy as np
import matplotlib
matplotlib.use("TkAgg")
import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection
from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg
import ttkbootstrap as tb

from Config import ConfigError, SimulationConfig
from Needle import NeedleEngine
from Scheduler import TkScheduler
from Session import BuffonSession
from Wager import Direction, WagerError, WagerState

TICK_MS = 30
CROSS_COLOR = (0.956, 0.263, 0.212)   # червоний: перетнула лінію
MISS_COLOR = (0.298, 0.686, 0.314)    # зелений: не перетнула


class TextLogHandler(logging.Handler):
    """Дублює записи логера у вікно логу (через root.after, з будь-якого місця)."""

    def __init__(self, app):
        super().__init__(level=logging.INFO)
        self.app = app
        self.setFormatter(logging.Formatter("%(message)s"))

    def emit(self, record):
        self.app.log(self.format(record))


class BuffonApp:
    def __init__(self, root):
        self.root = root
        self.root.title("Buffon Needle Explorer")

        self.style = tb.Style(theme='darkly')
        try: self.root.state('zoomed')
        except tk.TclError: self.root.geometry("1200x800")

        self.config = SimulationConfig()
        self.session = BuffonSession(self.config, scheduler=TkScheduler(self.root))

        self.is_running = False
        self.tick_id = None
        # Голки, що зараз на полі (сегменти + прапорці перетину)
        self.visible_segments = np.empty((0, 2, 2))
        self.visible_crossed = np.empty(0, dtype=bool)

        self.progress_var = tk.StringVar(value="Готовий до запуску.")
        self.result_var = tk.StringVar(value="π ≈ —")
        self.balance_var = tk.StringVar()
        self.quote_var = tk.StringVar(value="Шанси: —")
        self.bet_var = tk.StringVar(value="Активної ставки немає")

        self._build_ui()

        handler = TextLogHandler(self)
        logging.getLogger().addHandler(handler)
        self._refresh_betting()

    def _build_ui(self):
        main = tb.Frame(self.root)
        main.pack(fill=BOTH, expand=YES, padx=12, pady=12)

        left = tb.Frame(main, width=380)
        left.pack(side=LEFT, fill=Y, padx=(0, 12))
        left.pack_propagate(False)

        tb.Label(left, text="Buffon Needle Explorer", font=("Segoe UI", 16, "bold")).pack(pady=(6, 8))
        tb.Label(left, text="Голка Бюффона (UA)", font=("Segoe UI", 10, "italic"), bootstyle="info").pack(pady=(0, 8))

        f = tb.Frame(left); f.pack(fill='x', pady=4)
        self.length_entry = self._add_field(f, "L", "50", LEFT)
        self.spacing_entry = self._add_field(f, "D", "100", LEFT)
        self.batch_entry = self._add_field(left, "Голок за такт (Batch size)", "5")

        btn_row = tb.Frame(left); btn_row.pack(fill='x', pady=(15, 4))
        self.run_btn = tb.Button(btn_row, text="Запустити", bootstyle="success", command=self.start)
        self.run_btn.pack(side=LEFT, expand=YES, fill=X, padx=(0, 4))
        self.stop_btn = tb.Button(btn_row, text="Стоп", bootstyle="danger", command=self.stop, state=DISABLED)
        self.stop_btn.pack(side=LEFT, expand=YES, fill=X, padx=4)
        tb.Button(btn_row, text="Скинути", bootstyle="secondary", command=self.reset).pack(side=LEFT, expand=YES, fill=X, padx=(4, 0))

        self._init_betting(left)

        tb.Label(left, text="Лог").pack(anchor='w', pady=(8, 0))
        self.stats_text = tk.Text(left, height=8, bg='#1a1a1a', fg='white', bd=0, font=("Consolas", 9))
        self.stats_text.pack(fill='both', pady=(4, 6))

        self._init_plots(main)

    def _init_betting(self, parent):
        frame = tb.Frame(parent)
        frame.pack(fill='x', pady=6)
        tb.Label(frame, text="Ставки на збіжність", bootstyle="warning").pack(anchor='w', pady=(10, 5))
        tb.Label(frame, textvariable=self.balance_var).pack(anchor='w')

        row = tb.Frame(frame); row.pack(fill='x', pady=4)
        self.stake_entry = self._add_field(row, "Сума", "10", LEFT)
        self.target_entry = self._add_field(row, "Кидків", "1000", LEFT)
        self.stake_entry.bind("<KeyRelease>", lambda e: self._refresh_betting())
        self.target_entry.bind("<KeyRelease>", lambda e: self._refresh_betting())

        tb.Label(frame, textvariable=self.quote_var, font=("Consolas", 9)).pack(anchor='w', pady=2)

        btns = tb.Frame(frame); btns.pack(fill='x', pady=4)
        digits = self.config.convergence_target_digits
        self.yes_btn = tb.Button(btns, text=f"ТАК ({digits} зн.)", bootstyle="success-outline",
                                 command=lambda: self.place_bet(Direction.YES))
        self.yes_btn.pack(side=LEFT, expand=YES, fill=X, padx=(0, 4))
        self.no_btn = tb.Button(btns, text=f"НІ ({digits} зн.)", bootstyle="danger-outline",
                                command=lambda: self.place_bet(Direction.NO))
        self.no_btn.pack(side=LEFT, expand=YES, fill=X, padx=4)
        self.cancel_btn = tb.Button(btns, text="Скасувати", bootstyle="secondary-outline",
                                    command=self.cancel_bet, state=DISABLED)
        self.cancel_btn.pack(side=LEFT, expand=YES, fill=X, padx=(4, 0))

        self.bet_progress = tb.Progressbar(frame, maximum=100, bootstyle="info-striped")
        self.bet_progress.pack(fill='x', pady=(6, 2))
        tb.Label(frame, textvariable=self.bet_var, wraplength=350).pack(anchor='w')

    def _add_field(self, parent, label, default, side=None):
        if side == LEFT:
            tb.Label(parent, text=label).pack(side=LEFT, padx=(0, 4))
            e = tb.Entry(parent, width=8); e.insert(0, default); e.pack(side=LEFT, padx=(0, 8))
            return e
        else:
            tb.Label(parent, text=label).pack(anchor='w')
            e = tb.Entry(parent); e.insert(0, default); e.pack(fill='x', pady=2)
            return e

    def _init_plots(self, parent):
        right = tb.Frame(parent); right.pack(side=LEFT, fill=BOTH, expand=YES)

        # Верхній графік - Поле з голками
        self.fig_field, self.ax_field = self._create_fig(7, 4)
        self.ax_field.set_title("Поле з лініями", color='white', fontsize=10)
        self.needles = LineCollection([], linewidths=1.5)
        self.ax_field.add_collection(self.needles)
        self._draw_lines()
        self.canvas_field = FigureCanvasTkAgg(self.fig_field, master=right)
        self.canvas_field.get_tk_widget().pack(fill=BOTH, expand=YES, padx=6, pady=(6, 2))

        # Нижній графік - Збіжність
        self.fig_conv, self.ax_conv = self._create_fig(7, 3)
        self.ax_conv.axhline(math.pi, color='#ff4444', lw=1, linestyle='--')
        self.line_conv, = self.ax_conv.plot([], [], color='#00BFFF', lw=2)
        self.ax_conv.set_title("Збіжність оцінки (Convergence)", color='white', fontsize=10)
        self.canvas_conv = FigureCanvasTkAgg(self.fig_conv, master=right)
        self.canvas_conv.get_tk_widget().pack(fill=BOTH, expand=YES, padx=6, pady=(2, 6))

        tb.Label(right, textvariable=self.progress_var, font=("Segoe UI", 10)).pack(anchor='w', padx=8, pady=5)
        tb.Label(right, textvariable=self.result_var, font=("Segoe UI", 12, "bold"), bootstyle="inverse-primary").pack(anchor='w', padx=8, pady=(0, 5))

    def _create_fig(self, w, h):
        fig, ax = plt.subplots(figsize=(w, h))
        fig.patch.set_facecolor('#2b2b2b')
        ax.set_facecolor('#1e1e1e')
        ax.tick_params(colors='white')
        return fig, ax

    def _draw_lines(self):
        width, height, D = self.config.field_width, self.config.field_height, self.config.line_spacing
        for line in list(self.ax_field.lines):
            line.remove()
        for x in np.arange(0.0, width + D, D):
            self.ax_field.axvline(x, color='#888888', lw=1)
        self.ax_field.set_xlim(0, width); self.ax_field.set_ylim(0, height)
        self.ax_field.set_aspect('equal')

    def log(self, msg):
        self.root.after(0, lambda: self._log_safe(msg))

    def _log_safe(self, msg):
        self.stats_text.insert(tk.END, f"> {msg}\n"); self.stats_text.see(tk.END)

    def _read_config(self):
        try:
            config = SimulationConfig.from_strings({
                "needle_length": self.length_entry.get(),
                "line_spacing": self.spacing_entry.get(),
                "animation_batch_size": self.batch_entry.get(),
            })
        except ConfigError as e:
            self.log(f"Помилка параметрів: {e}")
            return False
        if config != self.config:
            self.config = config
            self.session.configure(config)
            self.visible_segments = np.empty((0, 2, 2))
            self.visible_crossed = np.empty(0, dtype=bool)
            self._draw_lines()
        return True

    def start(self):
        if self.is_running: return
        if not self._read_config(): return
        self.is_running = True
        self.run_btn.state(['disabled']); self.stop_btn.state(['!disabled'])
        self.log(f"Запущено: L={self.config.needle_length:g}, D={self.config.line_spacing:g}")
        self._tick()

    def stop(self):
        if not self.is_running: return
        self.is_running = False
        if self.tick_id is not None:
            self.root.after_cancel(self.tick_id)
            self.tick_id = None
        self._finish()

    def reset(self):
        self.stop()
        self.session.reset_estimator()
        self.visible_segments = np.empty((0, 2, 2))
        self.visible_crossed = np.empty(0, dtype=bool)
        self._update_ui()
        self._refresh_betting()

    def _tick(self):
        if not self.is_running: return
        # Порядок такту: кидки -> перевірка ставки -> малювання
        batch = self.session.advance()
        self._push_needles(batch)
        self._update_ui()
        self._refresh_betting()

        # Ставка завершилась: зупиняємо симуляцію, щоб показати результат
        if self.session.wagers.state is WagerState.RESOLVED:
            self._show_result(self.session.wagers.last_result)
            self.stop()
            return
        self.tick_id = self.root.after(TICK_MS, self._tick)

    def _push_needles(self, batch):
        x1, y1, x2, y2 = NeedleEngine.endpoints(batch, self.config.needle_length)
        segs = np.stack([np.column_stack([x1, y1]), np.column_stack([x2, y2])], axis=1)
        limit = self.config.max_visible_needles
        if limit == 0: return
        self.visible_segments = np.concatenate([self.visible_segments, segs])[-limit:]
        self.visible_crossed = np.concatenate([self.visible_crossed, batch.crossed])[-limit:]

    def _update_ui(self):
        if not self.root.winfo_exists(): return
        est = self.session.get_estimate()
        st = self.session.estimator
        self.progress_var.set(f"Кидків: {st.total_trials:,}   Перетинів: {st.crossings:,}")
        self.result_var.set(f"π ≈ {est.pi_estimate:.6f}   похибка {est.error_percent:.2f}%   "
                            f"точність {self.session.get_accuracy_rank()} зн.")

        # Старі голки поступово тьмяніють
        n = len(self.visible_segments)
        if n:
            age = np.arange(n, 0, -1)
            alpha = np.maximum(0.15, 1 - age / max(1, self.config.max_visible_needles))
            colors = np.where(self.visible_crossed[:, None], CROSS_COLOR, MISS_COLOR)
            self.needles.set_segments(self.visible_segments)
            self.needles.set_color(np.column_stack([colors, alpha]))
        else:
            self.needles.set_segments([])
        self.canvas_field.draw_idle()

        history = self.session.history
        pts = history[::max(1, len(history) // 300)]
        if pts:
            xs = [p[0] for p in pts]; ys = [p[1] for p in pts]
            self.line_conv.set_data(xs, ys)
        else:
            self.line_conv.set_data([], [])
        self.ax_conv.relim(); self.ax_conv.autoscale_view(); self.canvas_conv.draw_idle()

    def _read_bet_inputs(self):
        try:
            stake = float(self.stake_entry.get())
            target = int(self.target_entry.get())
        except ValueError:
            return None, None
        return stake, target

    def _refresh_betting(self):
        wagers = self.session.wagers
        self.balance_var.set(f"Баланс: ${self.session.balance:.2f}   Перемог: {self.session.games_won}")

        stake, target = self._read_bet_inputs()
        if target is not None and target > 0:
            q = self.session.get_convergence_quote(target)
            stake = stake if stake is not None and stake > 0 else 0.0
            self.quote_var.set(
                f"ТАК {q.probability_yes:6.1%}  1:{q.odds_yes:5.2f}  ${stake * q.odds_yes:.2f}\n"
                f"НІ  {q.probability_no:6.1%}  1:{q.odds_no:5.2f}  ${stake * q.odds_no:.2f}")
        else:
            self.quote_var.set("Шанси: —")

        state = wagers.state
        active = state is WagerState.ACTIVE
        for btn in (self.yes_btn, self.no_btn):
            btn.state(['disabled'] if active else ['!disabled'])
        self.cancel_btn.state(['!disabled'] if active else ['disabled'])

        status = wagers.status()
        if status is None:
            self.bet_progress['value'] = 0
            self.bet_var.set("Активної ставки немає")
        elif active:
            w = wagers.wager
            conv = "Зійшлося!" if status.has_converged else "Очікування..."
            self.bet_progress['value'] = status.progress_percent
            self.bet_var.set(f"{w.direction.name}: ${w.stake:.2f} × 1:{w.locked_odds:.2f}  "
                             f"({status.trials_elapsed}/{w.target_trials})  {conv}")

    def _show_result(self, result):
        if result is None: return
        chance = f" Шанс виграшу був {result.win_probability:.1%}." if result.win_probability is not None else ""
        if result.won:
            self.bet_var.set(f"ВИГРАШ ${result.payout:.2f}!{chance}")
        else:
            self.bet_var.set(f"ПРОГРАШ ${result.stake:.2f}.{chance}")
        self.log(f"Фінал: π ≈ {result.final_estimate:.6f}, {result.final_accuracy_rank} зн., "
                 f"{result.final_trials:,} кидків")
        self.balance_var.set(f"Баланс: ${self.session.balance:.2f}   Перемог: {self.session.games_won}")
        self.root.after(int(self.config.result_display_seconds * 1000) + 50, self._refresh_betting)

    def place_bet(self, direction):
        stake, target = self._read_bet_inputs()
        try:
            self.session.place_wager(direction, stake if stake is not None else float('nan'),
                                     target if target is not None else 0)
        except WagerError as e:
            messagebox.showwarning("Ставка", str(e))
            return
        self._refresh_betting()
        if not self.is_running:
            self.start()

    def cancel_bet(self):
        try:
            self.session.cancel_wager()
        except WagerError as e:
            self.log(str(e))
        self._refresh_betting()

    def _finish(self):
        if not self.root.winfo_exists(): return
        self.run_btn.state(['!disabled']); self.stop_btn.state(['disabled'])
        self.log("Зупинено.")

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    root = tb.Window(themename="darkly")
    app = BuffonApp(root)
    try: root.mainloop()
    except KeyboardInterrupt: sys.exit(0)
