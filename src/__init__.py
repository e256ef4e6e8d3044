"""paravault: sort notes, tasks and links into PARA and see projects through."""

__version__ = "0.1.0"
