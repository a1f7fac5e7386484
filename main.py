# main.py
import os
import sys
from pathlib import Path
import webview
from bridge import Api

def app_root() -> Path:
    """
    Retorna a raiz dos arquivos estáticos.
    - Em build PyInstaller one-file: usa a pasta temporária (sys._MEIPASS).
    - Em dev: usa a pasta onde está este arquivo.
    """
    meipass = getattr(sys, "_MEIPASS", None)
    if meipass:
        return Path(meipass)
    return Path(__file__).resolve().parent

def main() -> None:
    index_uri = (app_root() / "index.html").as_uri()

    window = webview.create_window(
        title="PDF Alvo - Compressão por tamanho",
        url=index_uri,
        width=760,
        height=720,
        resizable=True,
        js_api=Api(),
    )
    # PDFALVO_GUI vazio deixa o pywebview escolher o backend da plataforma
    webview.start(gui=os.getenv("PDFALVO_GUI") or None, debug=bool(os.getenv("PDFALVO_DEBUG")))

if __name__ == "__main__":
    main()
