"""
Ringsolve - Ring Arena Solver

Models the four-ring, twelve-column battle arena and searches for the
ring rotations and column shifts after which every enemy group can be
cleared in one attack. Provides:
- Arena state and the move model (rings and 8-cell column loops)
- A configurable catalog of attack shapes and the goal test
- Optimal (iterative deepening) and fast (best-first) search
- A Session API, with HTTP and command-line front ends
"""

__version__ = "0.1.0"
