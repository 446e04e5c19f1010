"""
Ideaji – SQLAlchemy ORM models package.

Imports all model classes so ``Base.metadata`` and the app can discover
them through a single ``import app.models``.
"""

from app.models.user import User                               # noqa: F401
from app.models.idea import Idea, Tag, idea_tags               # noqa: F401
from app.models.feedback import Feedback                       # noqa: F401
from app.models.notification import Notification               # noqa: F401
from app.models.reward import Redemption, Reward               # noqa: F401
from app.models.chat import Chat, ChatParticipant              # noqa: F401
from app.models.message import Message                         # noqa: F401
from app.models.ai_summary import AISummary                    # noqa: F401
from app.models.verification_token import VerificationToken    # noqa: F401
