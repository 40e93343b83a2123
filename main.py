"""
Trackademic Reminders — Entry Point.

Single entry point: `python main.py` starts the deadline reminder job.
"""

from trackademic.service import main

if __name__ == "__main__":
    main()
