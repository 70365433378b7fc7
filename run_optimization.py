#!/usr/bin/env python3
"""
shade-evo: Evolutionary design-space optimization for shading devices

Main entry point for running an optimization from a YAML config or a preset.

Usage:
    python run_optimization.py --preset maximize-daylight --fitness examples.basic_optimization:daylight_model --quick
    python run_optimization.py --config config/moga.yaml --fitness my_sim:evaluate --checkpoint runs/cp.json --resume
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from shade_evo.cli import main


if __name__ == "__main__":
    sys.exit(main())
