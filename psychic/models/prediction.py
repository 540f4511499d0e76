from sqlalchemy import Column, String, Integer, JSON, Text

from psychic.database import Base


class Prediction(Base):
    __tablename__ = "predictions"

    id = Column(String, primary_key=True)
    created_at = Column(String, nullable=False, index=True)
    updated_at = Column(String, nullable=False)
    status = Column(String, nullable=False, default="created")

    label_a = Column(String, nullable=False)
    label_b = Column(String, nullable=False)
    picture_a = Column(JSON, nullable=False)
    picture_b = Column(JSON, nullable=False)
    binding_picture_id = Column(String, nullable=False)

    prediction_text = Column(Text, nullable=True)
    prediction_sketch_ref = Column(String, nullable=True)
    prediction_model = Column(String, nullable=True)
    prediction_timestamp = Column(String, nullable=True)

    matched_label = Column(String, nullable=True)
    confidence_score = Column(Integer, nullable=True)
    reasoning = Column(Text, nullable=True)
    analysis_a = Column(Text, nullable=True)
    analysis_b = Column(Text, nullable=True)

    winning_label = Column(String, nullable=True)
    revealed_picture_id = Column(String, nullable=True)
    reveal_timestamp = Column(String, nullable=True)
