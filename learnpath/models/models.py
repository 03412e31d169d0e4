from learnpath.config import Base
from learnpath.schemas.pathway_schemas import PathwayStatus
from learnpath.utils.common import utcnow
from sqlalchemy import Column, Integer, String, JSON, DateTime, ForeignKey, Text, Float, Index, Enum as SQLEnum, text
from sqlalchemy.orm import relationship


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True)
    hashed_password = Column(String)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class LearnerProfile(Base):
    __tablename__ = "learner_profiles"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, index=True, nullable=False)
    learning_style = Column(String, nullable=False, default="visual")  # visual|auditory|reading|kinesthetic
    math_level = Column(String, nullable=False, default="beginner")
    programming_level = Column(String, nullable=False, default="beginner")
    preferred_domain = Column(String, nullable=False, default="ml")
    goal_id = Column(String, ForeignKey("goals.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", backref="learner_profile", foreign_keys=[user_id])
    # Append-only history, oldest first.
    assessments = relationship(
        "Assessment",
        backref="profile",
        cascade="all, delete-orphan",
        order_by="Assessment.id",
    )


class Assessment(Base):
    __tablename__ = "assessments"
    id = Column(Integer, primary_key=True, index=True)
    profile_id = Column(Integer, ForeignKey("learner_profiles.id"), index=True, nullable=False)
    category = Column(String, nullable=False, index=True)
    score = Column(Float, nullable=False)
    responses = Column(JSON, nullable=False)  # list of AssessmentResponse dicts
    recommendations = Column(JSON, nullable=False)
    completed_at = Column(DateTime, default=utcnow, nullable=False)


class Goal(Base):
    __tablename__ = "goals"
    id = Column(String, primary_key=True, index=True)  # uuid
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String, nullable=False, index=True)
    level = Column(String, nullable=False, index=True)  # beginner|intermediate|advanced
    estimated_duration = Column(Float, nullable=False)
    prerequisites = Column(JSON, nullable=False)  # list of Prerequisite dicts
    modules = Column(JSON, nullable=False)  # ordered list of GoalModule dicts
    created_at = Column(DateTime, default=utcnow, nullable=False)


class Pathway(Base):
    __tablename__ = "pathways"
    id = Column(String, primary_key=True, index=True)  # uuid
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    goal_id = Column(String, ForeignKey("goals.id"), index=True, nullable=False)
    status = Column(
        SQLEnum(
            PathwayStatus,
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
        default=PathwayStatus.ACTIVE,
        nullable=False,
        index=True,
    )
    progress = Column(Integer, default=0, nullable=False)
    current_module = Column(Integer, default=0, nullable=False)
    module_progress = Column(JSON, nullable=False)
    adaptive_recommendations = Column(JSON, nullable=False)
    next_goals = Column(JSON, nullable=False)
    started_at = Column(DateTime, default=utcnow, nullable=False)
    last_accessed_at = Column(DateTime, default=utcnow, nullable=False)
    estimated_completion_date = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    version = Column(Integer, nullable=False)

    user = relationship("User", backref="pathways", foreign_keys=[user_id])
    goal = relationship("Goal", foreign_keys=[goal_id])

    __mapper_args__ = {"version_id_col": version}
    __table_args__ = (
        # At most one non-completed pathway per (user, goal).
        Index(
            "uq_pathways_user_goal_open",
            "user_id",
            "goal_id",
            unique=True,
            sqlite_where=text("status != 'completed'"),
            postgresql_where=text("status != 'completed'"),
        ),
    )


class QuizAttempt(Base):
    __tablename__ = "quiz_attempts"
    id = Column(String, primary_key=True, index=True)  # uuid
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    pathway_id = Column(String, ForeignKey("pathways.id"), index=True, nullable=False)
    module_index = Column(Integer, nullable=False)
    score = Column(Float, nullable=False)
    responses = Column(JSON, nullable=False)
    total_time_spent = Column(Float, default=0.0, nullable=False)
    completed_at = Column(DateTime, default=utcnow, nullable=False)

    pathway = relationship("Pathway", backref="quiz_attempts", foreign_keys=[pathway_id])
