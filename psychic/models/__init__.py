from psychic.models.prediction import Prediction

__all__ = ["Prediction"]
