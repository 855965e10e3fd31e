import re

from churchhub.extensions import db
from .mixins import TenantScopedMixin

YOUTUBE_ID_PATTERN = re.compile(
    r"(?:youtu\.be/|youtube\.com/(?:embed/|v/|watch\?v=|watch\?.+&v=))([^&?]+)"
)


class Sermon(TenantScopedMixin, db.Model):
    __tablename__ = "sermons"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    pastor_name = db.Column(db.String(255), nullable=True)
    sermon_date = db.Column(db.Date, nullable=False, server_default=db.func.current_date())
    video_url = db.Column(db.String(1024), nullable=True)
    thumbnail_url = db.Column(db.String(1024), nullable=True)
    audio_url = db.Column(db.String(1024), nullable=True)
    document_url = db.Column(db.String(1024), nullable=True)
    presentation_url = db.Column(db.String(1024), nullable=True)

    @property
    def embed_url(self):
        if not self.video_url:
            return None
        match = YOUTUBE_ID_PATTERN.search(self.video_url)
        return f"https://www.youtube.com/embed/{match.group(1)}" if match else None

    def matches(self, query: str) -> bool:
        needle = query.lower()
        return any(
            needle in (value or "").lower()
            for value in (self.title, self.pastor_name, self.description)
        )

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "pastor_name": self.pastor_name,
            "sermon_date": self.sermon_date.isoformat() if self.sermon_date else None,
            "video_url": self.video_url,
            "embed_url": self.embed_url,
            "thumbnail_url": self.thumbnail_url,
            "audio_url": self.audio_url,
            "document_url": self.document_url,
            "presentation_url": self.presentation_url,
            **self.audit_dict(),
        }
