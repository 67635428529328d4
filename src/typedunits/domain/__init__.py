"""Доменные семейства единиц: physics (float) и labels (str/int)."""
