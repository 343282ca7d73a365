"""REPS console — argparse CLI and the interactive menu."""
