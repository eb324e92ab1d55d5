"""3Dブック生成ダイアログ（プレビュー付き）。"""

import tkinter as tk
from pathlib import Path
from tkinter import filedialog, messagebox

from PIL import Image, ImageTk

from paperback.core.config_manager import RenderSettings, load_window_state, save_window_state
from paperback.media.box3d.base import generate_book_image

PREVIEW_MAX = 420
_PREVIEW_BORDER = 24


def open_book3d_dialog(
    parent: tk.Misc,
    cover_path: Path,
    settings: RenderSettings,
    dest_path: "Path | None" = None,
    on_success: "callable[[Path], None] | None" = None,
) -> tk.Toplevel:
    """カバー画像から3Dブック画像を生成するダイアログ。ヨー・チルト・開き角をスライダーで調整する。"""
    try:
        orig_img = Image.open(cover_path).convert("RGBA")
    except OSError as e:
        messagebox.showerror("画像読み込みエラー", str(e), parent=parent)
        raise

    book = settings.book

    dlg = tk.Toplevel(parent)
    dlg.title("cover → 3D book 生成")
    dlg.resizable(False, False)

    tk.Label(dlg, text="  cover → 3D book  生成", font=("Arial", 10, "bold"), anchor="w").pack(
        fill="x", padx=12, pady=(10, 0)
    )
    tk.Label(dlg, text=f"  {cover_path.name}", font=("Arial", 9), fg="#555", anchor="w").pack(
        fill="x", padx=12, pady=(2, 6)
    )
    tk.Frame(dlg, height=1, bg="#cccccc").pack(fill="x")

    # コントロール部（横並び・上部）
    ctrl_frame = tk.Frame(dlg)
    ctrl_frame.pack(fill="x", padx=12, pady=(8, 4))

    def _slider(label: str, value: float, lo: float, hi: float, res: float) -> tk.DoubleVar:
        frame = tk.Frame(ctrl_frame)
        frame.pack(side="left", padx=(0, 16))
        tk.Label(frame, text=label, font=("Arial", 9), anchor="w").pack(anchor="w")
        var = tk.DoubleVar(value=value)
        tk.Scale(
            frame, from_=lo, to=hi, resolution=res,
            orient="horizontal", variable=var, length=140,
            font=("Arial", 8),
        ).pack()
        return var

    yaw_var = _slider("回転 (Y):", book.y_angle, -180, 180, 1)
    tilt_var = _slider("見下ろし (X):", book.x_angle, 0, 90, 1)
    open_var = _slider("開き角:", book.partial_open_angle, 0, 20, 0.5)

    opt_frame = tk.Frame(ctrl_frame)
    opt_frame.pack(side="left", anchor="s", pady=(0, 4))
    shadow_var = tk.BooleanVar(value=True)
    tk.Checkbutton(
        opt_frame, text="シャドウ", variable=shadow_var, font=("Arial", 9),
    ).pack(anchor="w")

    tk.Frame(dlg, height=1, bg="#e0e0e0").pack(fill="x", padx=12)

    # プレビュー部（下部・チェッカーボード背景）
    preview_canvas = tk.Canvas(
        dlg, width=PREVIEW_MAX, height=PREVIEW_MAX,
        bg="#d0d0d0", highlightthickness=1, highlightbackground="#cccccc",
    )
    preview_canvas.pack(padx=12, pady=8)
    preview_canvas._photo_ref = None

    def _draw_checker(canvas: tk.Canvas, w: int, h: int, size: int = 12) -> None:
        for y in range(0, h, size):
            for x in range(0, w, size):
                fill = "#ffffff" if (x // size + y // size) % 2 == 0 else "#cccccc"
                canvas.create_rectangle(x, y, x + size, y + size, fill=fill, outline="")

    _preview_after_id: list = [None]

    def current_config(preview: bool):
        changes = dict(
            y_angle=yaw_var.get(),
            x_angle=tilt_var.get(),
            partial_open_angle=open_var.get(),
        )
        if preview:
            # プレビューは小さいキャンバスに自動フィットさせる
            changes.update(
                output_width=PREVIEW_MAX, output_height=PREVIEW_MAX,
                output_border=_PREVIEW_BORDER, output_dpi=0.0, output_origin=None,
            )
        return book.with_changes(**changes)

    def render(preview: bool) -> "Image.Image":
        return generate_book_image(
            orig_img,
            current_config(preview),
            cover=settings.cover,
            shadow=settings.shadow if shadow_var.get() else None,
            background=None if preview else settings.background,
        )

    def update_preview(*_) -> None:
        if _preview_after_id[0] is not None:
            dlg.after_cancel(_preview_after_id[0])
        _preview_after_id[0] = dlg.after(150, _do_update_preview)

    def _do_update_preview() -> None:
        _preview_after_id[0] = None
        try:
            img3d = render(preview=True)
        except ValueError as e:
            preview_canvas.delete("all")
            preview_canvas.create_text(
                PREVIEW_MAX // 2, PREVIEW_MAX // 2, width=PREVIEW_MAX - 40,
                text=f"(生成エラー)\n{e}", fill="#cc0000", font=("Arial", 10),
            )
            return

        photo = ImageTk.PhotoImage(img3d)
        preview_canvas.delete("all")
        _draw_checker(preview_canvas, PREVIEW_MAX, PREVIEW_MAX)
        preview_canvas.create_image(
            PREVIEW_MAX // 2, PREVIEW_MAX // 2, anchor="center", image=photo,
        )
        preview_canvas._photo_ref = photo

    for var in (yaw_var, tilt_var, open_var, shadow_var):
        var.trace_add("write", update_preview)

    dlg.after(100, _do_update_preview)

    tk.Frame(dlg, height=1, bg="#cccccc").pack(fill="x")
    footer = tk.Frame(dlg, bg="#f5f5f5")
    footer.pack(fill="x", pady=6)

    def do_save() -> None:
        dest = dest_path
        if dest is None:
            chosen = filedialog.asksaveasfilename(
                parent=dlg, defaultextension=".png",
                initialfile=f"{cover_path.stem}_3d.png",
                filetypes=[("PNG", "*.png")],
            )
            if not chosen:
                return
            dest = Path(chosen)
        try:
            img3d = render(preview=False)
        except ValueError as e:
            messagebox.showerror("生成エラー", str(e), parent=dlg)
            return
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            img3d.save(dest, "PNG")
        except OSError as e:
            messagebox.showerror("保存エラー", str(e), parent=dlg)
            return
        close()
        if on_success:
            on_success(dest)

    def close() -> None:
        save_window_state(dlg)
        dlg.destroy()

    tk.Button(
        footer, text="保存", font=("Arial", 9), width=14, command=do_save,
    ).pack(side="left", padx=(12, 6))
    tk.Button(
        footer, text="閉じる", font=("Arial", 9), width=8, command=close,
    ).pack(side="right", padx=12)

    dlg.protocol("WM_DELETE_WINDOW", close)
    return dlg


def run_preview(cover_path: Path, settings: RenderSettings, dest_path: "Path | None" = None) -> None:
    """単独ウィンドウでダイアログを開く（コマンドラインの --preview）。"""
    root = tk.Tk()
    root.withdraw()
    dlg = open_book3d_dialog(
        root, cover_path, settings, dest_path,
        on_success=lambda path: print(f"保存しました: {path}"),
    )
    dlg.geometry(load_window_state())
    dlg.bind("<Destroy>", lambda e: root.destroy() if e.widget is dlg else None)
    root.mainloop()
