"""
neptune package
---------------
Assembles runnable game-server distributions from layered sources
(server package, gamemode overlay, realm overlay) and supervises the
assembled server with periodic re-assembly and automatic restart.
"""

__version__ = "0.3.0"
