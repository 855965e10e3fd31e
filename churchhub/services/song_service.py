from churchhub.exceptions import ValidationError, NotFoundError
from churchhub.extensions import db
from churchhub.models import Song, SongList, SongListItem
from churchhub.repositories import TenantRepository
from churchhub.validators import parse_song, parse_song_list

songs = TenantRepository(Song)
song_lists = TenantRepository(SongList)


class SongService:
    @staticmethod
    def get_songs(scope, search=None):
        """Members only: an empty list unless the viewer's church resolves."""
        results = songs.list(scope, order_by=Song.title.asc())
        if search:
            results = [song for song in results if song.matches(search)]
        return results

    @staticmethod
    def get_managed_songs(scope, selected_church_id=None):
        return songs.list(scope, order_by=Song.title.asc(), selected_church_id=selected_church_id)

    @staticmethod
    def create_song(scope, data, selected_church_id=None):
        return songs.create(scope, parse_song(data), selected_church_id)

    @staticmethod
    def update_song(scope, song_id, data):
        return songs.update(scope, song_id, parse_song(data, partial=True))

    @staticmethod
    def delete_song(scope, song_id):
        song = songs.get(scope, song_id)
        in_use = SongListItem.query.filter_by(song_id=song.id).count()
        if in_use:
            raise ValidationError("Song is used in a song list; remove it from the list first")
        return songs.delete(scope, song.id)

    # -- song lists ----------------------------------------------------------

    @staticmethod
    def get_song_lists(scope, selected_church_id=None):
        return song_lists.list(
            scope,
            order_by=[SongList.service_date.desc(), SongList.id.desc()],
            selected_church_id=selected_church_id,
        )

    @staticmethod
    def _build_items(scope, song_list, items):
        built = []
        for item in items:
            try:
                song = songs.get(scope, item["song_id"])
            except NotFoundError:
                raise ValidationError(f"Song {item['song_id']} not found")
            if song.church_id != song_list.church_id:
                raise ValidationError(f"Song {song.id} belongs to a different church")
            built.append(SongListItem(song_id=song.id, position=item["position"], notes=item["notes"]))
        return built

    @staticmethod
    def create_song_list(scope, data, selected_church_id=None):
        attrs = parse_song_list(data)
        items = attrs.pop("items", [])
        song_list = SongList(**scope.stamp(attrs, selected_church_id))
        try:
            song_list.items = SongService._build_items(scope, song_list, items)
            db.session.add(song_list)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return song_list

    @staticmethod
    def update_song_list(scope, song_list_id, data):
        attrs = parse_song_list(data, partial=True)
        items = attrs.pop("items", None)
        song_list = song_lists.get(scope, song_list_id)
        scope.ensure_row_in_scope(song_list)
        try:
            for key, value in attrs.items():
                setattr(song_list, key, value)
            if items is not None:
                song_list.items = SongService._build_items(scope, song_list, items)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return song_list

    @staticmethod
    def delete_song_list(scope, song_list_id):
        return song_lists.delete(scope, song_list_id)
