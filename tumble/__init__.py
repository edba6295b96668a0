"""
Tumble - Marble Computer Emulator

A deterministic emulator for a marble-powered mechanical computer board.
Marbles roll down a pegboard of ramps, bits, gear bits, crossovers and
interceptors. The package provides:
- Board topology and part placement rules
- A reversible, one-row-per-tick marble stepper
- Gear network synchronization
- Text, URL and snapshot board codecs
- A tick loop, REST API and command-line runner
"""

__version__ = "0.1.0"
