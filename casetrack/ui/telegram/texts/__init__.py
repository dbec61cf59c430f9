from casetrack.ui.telegram.texts import deadlines

__all__ = ["deadlines"]
