"""
Skyline 3D Generator

A standalone Python pipeline that turns daily activity counts (one or
more stacked years) into a 3D-printable skyline model and writes it as a
binary STL file.

Can be used as:
- CLI tool: python -m skyline3d.main (or the `skyline3d` console script)
- Library: skyline3d.generators.generate_stl / generate_stl_range
"""

__version__ = "0.1.0"
__author__ = "Skyline 3D Team"
