"""Reading and writing fitlog data files."""
