#!/usr/bin/env python3
"""Sticker Sequencer - Standalone Desktop Application.

Drop stickers on a canvas, move, resize and rotate them, and hear each one
as a step in a looping sequence. Built with PySide6.

Usage:
    python -m stickerseq.main [--tempo BPM] [--volume 0..1] [--settings FILE]
    stickerseq [--debug]
"""
import argparse
import logging
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication

# Allow running as a script (python stickerseq/main.py) in addition to
# running as a module (python -m stickerseq.main).
if not __package__:
    _parent = str(Path(__file__).resolve().parent.parent)
    if _parent not in sys.path:
        sys.path.insert(0, _parent)
    __package__ = "stickerseq"


def main():
    parser = argparse.ArgumentParser(description='Sticker Sequencer')
    parser.add_argument('--tempo', type=float, default=None,
                        help='Tempo in BPM (overrides the settings file)')
    parser.add_argument('--volume', type=float, default=None,
                        help='Master volume 0..1 (overrides the settings file)')
    parser.add_argument('--settings', type=str, default=None,
                        help='Path to a settings.json file')
    parser.add_argument('--debug', action='store_true',
                        help='Log at DEBUG level, including gesture and audio faults')
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    from .core.settings import Settings
    settings = Settings(args.settings)
    if args.tempo is not None and not settings.set_tempo(args.tempo):
        parser.error(f'--tempo must be a positive number, got {args.tempo}')
    if args.volume is not None:
        settings.set_global_volume(args.volume)

    app = QApplication(sys.argv)

    # Set application style
    app.setStyle('Fusion')

    # Import here to avoid circular imports
    from .app import App
    main_window = App(settings=settings)
    main_window.show()

    sys.exit(app.exec())


if __name__ == '__main__':
    main()
