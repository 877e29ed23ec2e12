"""
OFFER COMPUTATION & DRAFT PERSISTENCE ENGINE
Purchase-offer builder back end
"""

from .models import Attachment, DraftMeta, OfferDraft
from .repository import DraftRepository
from .session import OfferSession
from .validators import ImportRejected

__all__ = ['OfferSession', 'OfferDraft', 'DraftMeta', 'Attachment', 'DraftRepository', 'ImportRejected']
