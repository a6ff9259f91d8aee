"""Data models for lead profiles and lead records."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from functools import total_ordering
from typing import Optional, List, Dict, Any


@total_ordering
class LeadStatus(Enum):
    """Lifecycle stage of a lead, ordered from coldest to hottest."""

    VISITOR = "visitor"
    COLD_LEAD = "cold_lead"
    CANDIDATE = "candidate"
    HOT_LEAD = "hot_lead"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, LeadStatus):
            return NotImplemented
        return self.rank < other.rank


_STATUS_ORDER = [
    LeadStatus.VISITOR,
    LeadStatus.COLD_LEAD,
    LeadStatus.CANDIDATE,
    LeadStatus.HOT_LEAD,
]


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass
class AttributionData:
    """Acquisition metadata captured when a profile is created."""

    content_id: Optional[str] = None
    member_id: Optional[str] = None
    platform: Optional[str] = None
    referrer: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            'content_id': self.content_id,
            'member_id': self.member_id,
            'platform': self.platform,
            'referrer': self.referrer,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AttributionData":
        return cls(
            content_id=data.get('content_id'),
            member_id=data.get('member_id'),
            platform=data.get('platform'),
            referrer=data.get('referrer'),
        )


@dataclass(frozen=True)
class EngagementActivity:
    """A single scored action in a profile's history."""

    timestamp: datetime
    action: str
    points: float
    page_url: str = ""
    metadata: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp.isoformat(),
            'action': self.action,
            'points': self.points,
            'page_url': self.page_url,
            'metadata': self.metadata,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngagementActivity":
        return cls(
            timestamp=_parse_timestamp(data['timestamp']),
            action=data['action'],
            points=data.get('points', 0),
            page_url=data.get('page_url', ''),
            metadata=data.get('metadata'),
        )


@dataclass
class LeadPredictions:
    """Derived predictive metrics, always computed as a whole."""

    conversion_probability: float
    time_to_conversion: float  # days
    best_conversion_path: List[str]
    next_best_action: str
    risk_of_churn: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'conversion_probability': self.conversion_probability,
            'time_to_conversion': self.time_to_conversion,
            'best_conversion_path': list(self.best_conversion_path),
            'next_best_action': self.next_best_action,
            'risk_of_churn': self.risk_of_churn,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LeadPredictions":
        return cls(
            conversion_probability=data['conversion_probability'],
            time_to_conversion=data['time_to_conversion'],
            best_conversion_path=list(data.get('best_conversion_path', [])),
            next_best_action=data.get('next_best_action', ''),
            risk_of_churn=data['risk_of_churn'],
        )


@dataclass
class LeadProfile:
    """Internal scoring ledger for a session or lead."""

    id: str
    predictions: LeadPredictions
    status: LeadStatus = LeadStatus.VISITOR
    engagement_score: int = 0
    demographic_score: int = 0
    behavioral_score: int = 0
    conversion_readiness: float = 0.0
    last_activity: datetime = field(default_factory=datetime.now)
    source: str = "direct"
    attribution_data: Optional[AttributionData] = None
    activities: List[EngagementActivity] = field(default_factory=list)

    @property
    def total_score(self) -> int:
        return self.engagement_score + self.demographic_score + self.behavioral_score

    @property
    def completed_actions(self) -> set:
        return {a.action for a in self.activities}

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'status': self.status.value,
            'engagement_score': self.engagement_score,
            'demographic_score': self.demographic_score,
            'behavioral_score': self.behavioral_score,
            'conversion_readiness': self.conversion_readiness,
            'last_activity': self.last_activity.isoformat(),
            'source': self.source,
            'attribution_data': self.attribution_data.to_dict() if self.attribution_data else None,
            'activities': [a.to_dict() for a in self.activities],
            'predictions': self.predictions.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LeadProfile":
        attribution = data.get('attribution_data')
        return cls(
            id=data['id'],
            status=LeadStatus(data.get('status', 'visitor')),
            engagement_score=int(data.get('engagement_score', 0)),
            demographic_score=int(data.get('demographic_score', 0)),
            behavioral_score=int(data.get('behavioral_score', 0)),
            conversion_readiness=float(data.get('conversion_readiness', 0.0)),
            last_activity=_parse_timestamp(data['last_activity']),
            source=data.get('source', 'direct'),
            attribution_data=AttributionData.from_dict(attribution) if attribution else None,
            activities=[EngagementActivity.from_dict(a) for a in data.get('activities') or []],
            predictions=LeadPredictions.from_dict(data['predictions']),
        )


@dataclass(frozen=True)
class Lead:
    """External-facing lead record, a snapshot taken at creation time.

    Scores keep evolving on the matching LeadProfile; ``score`` and ``status``
    here are never updated after the lead is created.
    """

    id: str
    email: str
    source: str = "direct"
    status: LeadStatus = LeadStatus.VISITOR
    score: int = 0
    created_at: datetime = field(default_factory=datetime.now)
    name: Optional[str] = None
    phone: Optional[str] = None
    user_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'email': self.email,
            'source': self.source,
            'status': self.status.value,
            'score': self.score,
            'created_at': self.created_at.isoformat(),
            'name': self.name,
            'phone': self.phone,
            'user_id': self.user_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Lead":
        return cls(
            id=data['id'],
            email=data.get('email', ''),
            source=data.get('source', 'direct'),
            status=LeadStatus(data.get('status', 'visitor')),
            score=int(data.get('score', 0)),
            created_at=_parse_timestamp(data['created_at']),
            name=data.get('name'),
            phone=data.get('phone'),
            user_id=data.get('user_id'),
        )
