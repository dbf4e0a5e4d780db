"""
Caricature generator package.
Portrait search across image providers plus reference-guided image generation.
"""
