"""
Dashboard schemas for Université Quiz
"""

from typing import List, Optional

from pydantic import BaseModel


class StatsResponse(BaseModel):
    totalUsers: int
    totalQuiz: int
    totalScores: int
    avgTime: int
    monthlyLabels: List[str]
    monthlyScores: List[int]


class LeaderboardEntry(BaseModel):
    rank: int
    name: str
    score: int
    xp: int
    badges: List[str]


class Feedback(BaseModel):
    question: str
    user_answer: str
    correct: bool
    explanation: Optional[str] = None


class ProgressionResponse(BaseModel):
    xp: int
    level: int
    levelName: str
    badges: List[str]
    feedbacks: List[Feedback]
    matiereLabels: List[str]
    matiereScores: List[int]
