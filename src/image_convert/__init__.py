"""Image identification and format conversion built on Pillow and CairoSVG."""
