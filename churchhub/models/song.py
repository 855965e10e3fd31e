from churchhub.extensions import db
from .mixins import TenantScopedMixin


class Song(TenantScopedMixin, db.Model):
    __tablename__ = "songs"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    artist = db.Column(db.String(255), nullable=True)
    lyrics = db.Column(db.Text, nullable=True)
    key_signature = db.Column(db.String(10), nullable=True)
    tempo = db.Column(db.Integer, nullable=True)
    audio_url = db.Column(db.String(1024), nullable=True)

    def matches(self, query: str) -> bool:
        needle = query.lower()
        return needle in self.title.lower() or needle in (self.artist or "").lower()

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "artist": self.artist,
            "lyrics": self.lyrics,
            "key_signature": self.key_signature,
            "tempo": self.tempo,
            "audio_url": self.audio_url,
            **self.audit_dict(),
        }


class SongList(TenantScopedMixin, db.Model):
    __tablename__ = "song_lists"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    service_date = db.Column(db.Date, nullable=False)
    notes = db.Column(db.Text, nullable=True)

    items = db.relationship(
        "SongListItem",
        order_by="SongListItem.position",
        cascade="all, delete-orphan",
        back_populates="song_list",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "service_date": self.service_date.isoformat() if self.service_date else None,
            "notes": self.notes,
            "items": [item.to_dict() for item in self.items],
            **self.audit_dict(),
        }


class SongListItem(db.Model):
    __tablename__ = "song_list_items"

    id = db.Column(db.Integer, primary_key=True)
    song_list_id = db.Column(db.Integer, db.ForeignKey("song_lists.id", ondelete="CASCADE"), nullable=False)
    song_id = db.Column(db.Integer, db.ForeignKey("songs.id"), nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0)
    notes = db.Column(db.Text, nullable=True)

    song_list = db.relationship("SongList", back_populates="items")
    song = db.relationship("Song")

    def to_dict(self):
        return {
            "id": self.id,
            "song_id": self.song_id,
            "title": self.song.title if self.song else None,
            "position": self.position,
            "notes": self.notes,
        }
