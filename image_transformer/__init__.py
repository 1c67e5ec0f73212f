"""
Image Transformer – region filtering over HTTP.

Numpy lookup tables do the colour math, Pillow handles the encoded bytes and
Flask serves the ``/process`` endpoint (see ``app.py``).
"""

__version__ = "1.0.0"
