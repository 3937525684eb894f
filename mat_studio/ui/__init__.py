"""Qt widgets for Mat Studio: canvas, docks and dialogs"""
