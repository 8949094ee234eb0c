"""Test package for the Metronome Timing Trainer.

This package contains unit tests for the deterministic timing core,
headless simulations of full sessions and the assessment battery, and a
smoke test for the pygame UI.  The UI tests run with pygame's dummy video
driver to avoid opening real windows.  To run these tests, execute
``pytest`` from the project root.
"""
