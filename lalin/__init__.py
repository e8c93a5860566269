"""Lalin — menstrual cycle tracking and prediction."""

__version__ = "0.1.0"
