"""Sticker Sequencer - a sticker canvas that plays as a step sequencer."""
