import logging
import os
from typing import Optional
import tkinter as tk
from tkinter import ttk, filedialog, messagebox
from models import AnalysisResult, ExportError, LogReadError, StepKind
from config_manager import CONFIG_FILE, load_config, ensure_directories, resolve_log_level, Config
from aggregator import analyze_text, format_duration
from loader import load_and_analyze
from reports import export_events_csv, export_html_report, plot_outcome_distribution
from generator import generate_demo_trace, write_demo_trace

logger = logging.getLogger(__name__)

ALL_KINDS = "Все"


class TraceAnalyzerGUI:
    def __init__(self, master: tk.Tk):
        self.master = master
        master.title("Анализатор журнала развёртывания")

        self.config: Config = load_config()
        try:
            ensure_directories(self.config)
        except OSError as e:
            logger.warning("Working directories not created: %s", e)
            messagebox.showwarning("Каталоги", f"Не удалось создать рабочие каталоги:\n{e}")
        self.result: Optional[AnalysisResult] = None
        self.source_path: Optional[str] = None

        self.kind_filter_var = tk.StringVar(value=ALL_KINDS)

        self._build_ui()
        self.refresh_view()

    def _build_ui(self):
        # Верхняя панель
        top = ttk.Frame(self.master)
        top.pack(side=tk.TOP, fill=tk.X, padx=5, pady=5)

        ttk.Button(top, text="Открыть журнал", command=self.load_log_file).pack(side=tk.LEFT, padx=2)
        ttk.Button(top, text="Учебный журнал", command=self.generate_demo_log).pack(side=tk.LEFT, padx=10)
        ttk.Button(top, text="Перезагрузить конфиг", command=self.reload_config).pack(side=tk.RIGHT)

        # Фильтр по исходу
        kind_combo = ttk.Combobox(
            top,
            textvariable=self.kind_filter_var,
            values=[ALL_KINDS] + [k.value for k in StepKind],
            width=10,
            state="readonly",
        )
        kind_combo.pack(side=tk.RIGHT, padx=5)
        ttk.Label(top, text="Исход:").pack(side=tk.RIGHT, padx=(0, 2))
        kind_combo.bind("<<ComboboxSelected>>", lambda e: self.refresh_timeline())

        # Временная шкала
        table_frame = ttk.Frame(self.master)
        table_frame.pack(side=tk.TOP, fill=tk.BOTH, expand=True, padx=5, pady=5)
        columns = ("time", "kind", "message", "code")
        self.tree_events = ttk.Treeview(table_frame, columns=columns, show="headings", selectmode="browse")
        for col, text, width, anchor in [
            ("time", "Время", 170, tk.W),
            ("kind", "Исход", 80, tk.CENTER),
            ("message", "Сообщение", 480, tk.W),
            ("code", "Код", 100, tk.W),
        ]:
            self.tree_events.heading(col, text=text)
            self.tree_events.column(col, width=width, anchor=anchor)
        self.tree_events.tag_configure(StepKind.ERROR.value, background="#ffe3e3")
        self.tree_events.tag_configure(StepKind.WARNING.value, background="#fff3c4")

        vsb = ttk.Scrollbar(table_frame, orient="vertical", command=self.tree_events.yview)
        self.tree_events.configure(yscrollcommand=vsb.set)
        self.tree_events.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)
        vsb.pack(side=tk.RIGHT, fill=tk.Y)

        # Сводка
        summary_label = ttk.Label(self.master, text="Сводка:")
        summary_label.pack(side=tk.TOP, anchor=tk.W, padx=5)
        self.text_summary = tk.Text(self.master, height=6, wrap="word")
        self.text_summary.pack(side=tk.TOP, fill=tk.X, expand=False, padx=5)
        self.text_summary.configure(font=("Courier New", 9))

        # Нижняя панель
        bottom = ttk.Frame(self.master)
        bottom.pack(side=tk.BOTTOM, fill=tk.X, padx=5, pady=5)
        self.stats_label = ttk.Label(bottom, text="Событий: 0")
        self.stats_label.pack(side=tk.LEFT)
        ttk.Button(bottom, text="Экспорт CSV", command=self.export_csv).pack(side=tk.LEFT, padx=5)
        ttk.Button(bottom, text="Экспорт отчёта (HTML)", command=self.export_html).pack(side=tk.LEFT, padx=5)
        ttk.Button(bottom, text="График по исходам", command=self.show_chart).pack(side=tk.RIGHT, padx=5)

    # Обновление представления

    def refresh_view(self):
        self.refresh_timeline()
        self.refresh_summary()

    def refresh_timeline(self):
        for item in self.tree_events.get_children():
            self.tree_events.delete(item)
        if self.result is None:
            return

        selected = self.kind_filter_var.get()
        for idx, ev in enumerate(self.result.events):
            if selected != ALL_KINDS and ev.kind.value != selected:
                continue
            self.tree_events.insert(
                "",
                "end",
                iid=str(idx),
                values=(
                    ev.timestamp.isoformat(sep=" ", timespec="milliseconds"),
                    ev.kind.value,
                    ev.message,
                    ev.error_code or "—",
                ),
                tags=(ev.kind.value,),
            )

    def refresh_summary(self):
        self.text_summary.delete("1.0", tk.END)
        r = self.result
        if r is None:
            self.stats_label.config(text="Журнал не загружен")
            return

        self.stats_label.config(
            text=(
                f"Шагов: {r.total_steps}  |  "
                f"Success: {r.success_count}  Error: {r.failure_count}  "
                f"Warning: {r.warning_count}  |  {r.success_rate:.1f}%"
            )
        )
        lines = []
        if self.source_path:
            lines.append(f"Файл: {self.source_path}")
        lines.append(f"Общая длительность: {format_duration(r.total_duration)}")
        lines.append(f"Среднее время шага: {format_duration(r.average_step_duration)}")
        lines.append(f"Коды ошибок: {', '.join(sorted(r.error_codes)) or '—'}")
        self.text_summary.insert(tk.END, "\n".join(lines))

    # Действия

    def load_log_file(self):
        path = filedialog.askopenfilename(
            title="Выберите журнал развёртывания",
            initialdir=self.config.logs_dir if os.path.isdir(self.config.logs_dir) else None,
            filetypes=[("Log files", "*.log *.txt"), ("All files", "*.*")],
        )
        if not path:
            return
        try:
            result = load_and_analyze(path, self.config)
        except LogReadError as e:
            messagebox.showerror("Ошибка", str(e))
            return

        self.result = result
        self.source_path = path
        self.refresh_view()
        messagebox.showinfo(
            "Загрузка завершена",
            f"Файл: {os.path.basename(path)}\n"
            f"Распознано событий: {len(result.events)}",
        )

    def generate_demo_log(self):
        path = os.path.join(self.config.logs_dir, "deployment_demo.log")
        try:
            ensure_directories(self.config)
            lines = write_demo_trace(path)
        except OSError as e:
            logger.warning("Demo trace not saved: %s", e)
            lines = generate_demo_trace()
            path = None

        self.result = analyze_text("\n".join(lines))
        self.source_path = path
        self.refresh_view()

        msg = "Учебный журнал сгенерирован и загружен в программу."
        if path:
            msg += f" Файл сохранён: {path}"
        messagebox.showinfo("Готово", msg)

    def reload_config(self):
        self.config = load_config()
        logging.getLogger().setLevel(resolve_log_level(self.config))
        messagebox.showinfo("Конфигурация", f"Конфигурация перезагружена из {CONFIG_FILE}.")

    def show_chart(self):
        if self.result is None:
            messagebox.showwarning("График", "Журнал не загружен.")
            return
        plot_outcome_distribution(self.result)

    def _ask_export_path(self, title: str, ext: str, label: str) -> str:
        return filedialog.asksaveasfilename(
            title=title,
            initialdir=self.config.reports_dir,
            defaultextension=ext,
            filetypes=[(label, f"*{ext}"), ("All files", "*.*")],
        )

    def export_csv(self):
        if self.result is None or not self.result.events:
            messagebox.showwarning("Экспорт", "Нет событий для экспорта.")
            return
        path = self._ask_export_path("Сохранить CSV", ".csv", "CSV files")
        if not path:
            return
        try:
            export_events_csv(self.result, path, self.config.csv_delimiter)
        except ExportError as e:
            messagebox.showerror("Ошибка", str(e))
            return
        messagebox.showinfo("Экспорт", f"CSV-файл сохранён: {path}")

    def export_html(self):
        if self.result is None:
            messagebox.showwarning("Экспорт", "Нет данных для отчёта.")
            return
        path = self._ask_export_path("Сохранить отчёт (HTML)", ".html", "HTML files")
        if not path:
            return
        try:
            export_html_report(self.result, path, self.config.report_title)
        except ExportError as e:
            messagebox.showerror("Ошибка", str(e))
            return
        messagebox.showinfo("Экспорт", f"Отчёт сохранён: {path}")


def main():
    cfg = load_config()
    logging.basicConfig(
        level=resolve_log_level(cfg),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )
    root = tk.Tk()
    TraceAnalyzerGUI(root)
    root.geometry("1000x700")
    root.mainloop()


if __name__ == "__main__":
    main()
