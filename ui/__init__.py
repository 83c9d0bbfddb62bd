"""
User interface layer: tree controller, text presenter and Tk components.
"""
