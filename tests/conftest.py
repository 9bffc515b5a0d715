import matplotlib

matplotlib.use("Agg") # experiments.py imports pyplot, keep it off any display
