from __future__ import annotations

import tkinter as tk
from tkinter import ttk, filedialog, messagebox, simpledialog
from typing import Optional

from PIL import Image, ImageTk

from .cli import setup_logging
from .errors import InputError, PixelCipherError
from .orchestrator import (
    DEFAULT_IMAGE_NAME,
    DEFAULT_TEXT_NAME,
    Orchestrator,
    decode_text,
    read_text_file,
    write_text_file,
)


class App:
    def __init__(self, root: tk.Tk):
        self.root = root
        self.root.title("Pixel-Cipher • AES-256 PNG")
        self.root.geometry("780x560")
        self.orchestrator = Orchestrator(self._ask_passphrase)
        self.text_file_path: Optional[str] = None
        self.file_mode = tk.BooleanVar(value=False)
        self._buttons = []

        ttk.Label(root, text="Pixel-Cipher • AES-256 PNG", anchor="center", font=("Segoe UI", 16, "bold")).pack(fill=tk.X, padx=12, pady=6)
        ttk.Label(root, text="A PIN prompt appears before every encode or decode.", anchor="center").pack(fill=tk.X)
        ttk.Separator(root, orient=tk.HORIZONTAL).pack(fill=tk.X)

        nb = ttk.Notebook(root)
        nb.pack(fill=tk.BOTH, expand=True)
        self.encode_frame = ttk.Frame(nb)
        self.decode_frame = ttk.Frame(nb)
        nb.add(self.encode_frame, text="Encode & Encrypt")
        nb.add(self.decode_frame, text="Decode & Decrypt")
        self._build_encode_tab()
        self._build_decode_tab()

        self.status_var = tk.StringVar(value="Ready")
        ttk.Label(root, textvariable=self.status_var, anchor="w").pack(fill=tk.X, padx=8, pady=4)
        self.root.protocol("WM_DELETE_WINDOW", self._on_close)

    def _build_encode_tab(self):
        f = self.encode_frame
        self.mode_button = ttk.Button(f, text="Switch to File Upload (.txt)", command=self._toggle_mode)
        self.mode_button.pack(anchor=tk.W, padx=12, pady=8)
        self._buttons.append(self.mode_button)

        self.text_panel = ttk.LabelFrame(f, text="Secret Text")
        self.text_panel.pack(fill=tk.BOTH, expand=True, padx=12, pady=4)
        self.text_box = tk.Text(self.text_panel, wrap=tk.WORD, height=8)
        self.text_box.pack(fill=tk.BOTH, expand=True, padx=8, pady=8)

        self.file_panel = ttk.LabelFrame(f, text="Text File")
        self.file_label_var = tk.StringVar(value="No file selected")
        ttk.Label(self.file_panel, textvariable=self.file_label_var).pack(side=tk.LEFT, fill=tk.X, expand=True, padx=8, pady=8)
        browse = ttk.Button(self.file_panel, text="Browse", command=self._browse_text_file)
        browse.pack(side=tk.LEFT, padx=8, pady=8)
        self._buttons.append(browse)

        actions = ttk.Frame(f)
        actions.pack(fill=tk.X, padx=12, pady=4)
        encode = ttk.Button(actions, text="Encrypt & Generate PNG", command=self._do_encode)
        encode.pack(side=tk.LEFT)
        self.save_png_button = ttk.Button(actions, text="Save PNG", command=self._save_png, state=tk.DISABLED)
        self.save_png_button.pack(side=tk.LEFT, padx=8)
        self._buttons.append(encode)

        self.preview_label = ttk.Label(f)
        self.preview_label.pack(fill=tk.X, padx=16, pady=8)

    def _build_decode_tab(self):
        f = self.decode_frame
        p = ttk.LabelFrame(f, text="Encrypted PNG")
        p.pack(fill=tk.X, padx=12, pady=8)
        self.image_path_var = tk.StringVar()
        ttk.Entry(p, textvariable=self.image_path_var).pack(side=tk.LEFT, fill=tk.X, expand=True, padx=8, pady=8)
        browse = ttk.Button(p, text="Browse", command=self._browse_image)
        browse.pack(side=tk.LEFT, padx=8, pady=8)
        decode = ttk.Button(p, text="Decode", command=self._do_decode)
        decode.pack(side=tk.LEFT, padx=8, pady=8)
        self._buttons.extend([browse, decode])

        p2 = ttk.LabelFrame(f, text="Decrypted Text")
        p2.pack(fill=tk.BOTH, expand=True, padx=12, pady=8)
        self.out_text_box = tk.Text(p2, wrap=tk.WORD, height=12)
        self.out_text_box.pack(fill=tk.BOTH, expand=True, padx=8, pady=8)
        self.save_text_button = ttk.Button(p2, text="Download Decrypted Text (.txt)", command=self._save_text, state=tk.DISABLED)
        self.save_text_button.pack(anchor=tk.E, padx=8, pady=4)

    def _ask_passphrase(self, prompt: str) -> Optional[str]:
        return simpledialog.askstring("PIN", prompt, show="*", parent=self.root)

    def _toggle_mode(self):
        self.file_mode.set(not self.file_mode.get())
        if self.file_mode.get():
            self.text_panel.pack_forget()
            self.file_panel.pack(fill=tk.X, padx=12, pady=4, after=self.mode_button)
            self.text_box.delete("1.0", tk.END)
            self.mode_button.configure(text="Switch to Textarea Input")
        else:
            self.file_panel.pack_forget()
            self.text_panel.pack(fill=tk.BOTH, expand=True, padx=12, pady=4, after=self.mode_button)
            self.text_file_path = None
            self.file_label_var.set("No file selected")
            self.mode_button.configure(text="Switch to File Upload (.txt)")

    def _browse_text_file(self):
        path = filedialog.askopenfilename(title="Load Text File", filetypes=[("Text", "*.txt"), ("All Files", "*.*")])
        if path:
            self.text_file_path = path
            self.file_label_var.set(f"File selected: {path}")

    def _browse_image(self):
        path = filedialog.askopenfilename(title="Select Encrypted PNG", filetypes=[("PNG", "*.png")])
        if path:
            self.image_path_var.set(path)

    def _do_encode(self):
        self._set_busy(True)
        self._set_status("Encrypting and encoding text to PNG...")
        try:
            if self.file_mode.get():
                plaintext = read_text_file(self.text_file_path or "")
            else:
                plaintext = self.text_box.get("1.0", tk.END).strip()
            image = self.orchestrator.encode(plaintext)
        except InputError as e:
            messagebox.showwarning("Missing", str(e))
            self._set_status(str(e))
            return
        except PixelCipherError as e:
            if self.orchestrator.current_image is None:
                self._clear_preview()
            messagebox.showerror("Error", str(e))
            self._set_status(str(e))
            return
        finally:
            self._set_busy(False)
        self._show_preview(image.path)
        self.save_png_button.configure(state=tk.NORMAL)
        self._set_status("Encrypted PNG generated successfully! Remember your PIN.")

    def _do_decode(self):
        path = self.image_path_var.get().strip()
        if not path:
            messagebox.showwarning("Missing", "Select an encrypted PNG")
            return
        self._set_busy(True)
        self._set_status("Decoding image to text...")
        try:
            plaintext = self.orchestrator.decode(path)
        except InputError as e:
            messagebox.showwarning("Missing", str(e))
            self._set_status(str(e))
            return
        except PixelCipherError as e:
            if self.orchestrator.current_image is None:
                self._clear_preview()
            messagebox.showerror("Error", str(e))
            self._set_status(str(e))
            return
        finally:
            self._set_busy(False)
        self._clear_preview()
        self.out_text_box.delete("1.0", tk.END)
        self.out_text_box.insert("1.0", decode_text(plaintext))
        self.save_text_button.configure(state=tk.NORMAL)
        self._set_status("Image decoded and decrypted successfully!")

    def _save_png(self):
        image = self.orchestrator.current_image
        if image is None:
            return
        path = filedialog.asksaveasfilename(title="Save PNG", initialfile=DEFAULT_IMAGE_NAME, defaultextension=".png", filetypes=[("PNG", "*.png")])
        if not path:
            return
        try:
            image.save(path)
        except PixelCipherError as e:
            messagebox.showerror("Error", str(e))
            return
        self._set_status(f"Saved PNG: {path}")

    def _save_text(self):
        text = self.out_text_box.get("1.0", "end-1c")
        if not text:
            return
        path = filedialog.asksaveasfilename(title="Save Text", initialfile=DEFAULT_TEXT_NAME, defaultextension=".txt", filetypes=[("Text", "*.txt")])
        if not path:
            return
        try:
            write_text_file(path, text)
        except PixelCipherError as e:
            messagebox.showerror("Error", str(e))
            return
        messagebox.showinfo("Saved", f"Wrote text to:\n{path}")

    def _show_preview(self, path: str):
        with Image.open(path) as src:
            w, h = src.size
            scale = max(1, min(220 // max(w, h), 16))
            img = src.resize((w * scale, h * scale), Image.Resampling.NEAREST)
        self.preview_img = ImageTk.PhotoImage(img)
        self.preview_label.configure(image=self.preview_img)

    def _clear_preview(self):
        self.preview_img = None
        self.preview_label.configure(image="")
        self.save_png_button.configure(state=tk.DISABLED)

    def _set_busy(self, busy: bool):
        state = tk.DISABLED if busy else tk.NORMAL
        for button in self._buttons:
            button.configure(state=state)
        self.root.update_idletasks()

    def _set_status(self, s: str):
        self.status_var.set(s)

    def _on_close(self):
        self.orchestrator.close()
        self.root.destroy()


def main():
    setup_logging()
    root = tk.Tk()
    App(root)
    root.mainloop()


if __name__ == "__main__":
    main()
