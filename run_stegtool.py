#!/usr/bin/env python3
"""Launch stegtool from a source checkout.

Usage:
    python run_stegtool.py suspicious.png
    python run_stegtool.py -i suspicious.png
    python run_stegtool.py -b -s paranoid a.jpg b.wav c.mp4
"""
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from interfaces.cli import main


if __name__ == "__main__":
    sys.exit(main())
