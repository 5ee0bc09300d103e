"""Modelos, estados y errores del dominio.

Por qué:
- Aquí viven las estructuras de datos puras y estrictas (Pydantic v2).
- El dominio no conoce subprocess, systemd ni la CLI: solo conceptos del problema.
"""
