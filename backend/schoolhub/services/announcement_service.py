"""
Anuncios de la escuela, dirigidos a grupos de usuarios mediante tags.
"""
import logging

from schoolhub.cql.result import ResultCode
from schoolhub.models import Announcement, AnswerOwnerType
from schoolhub.services.base import (
    ServiceError, expect, listing, new_id, now, service_call, tolerate,
)
from schoolhub.services.relations import GONE, RelationsService

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 200
ANNOUNCEMENT = AnswerOwnerType.ANNOUNCEMENT


class AnnouncementService(RelationsService):

    # ==========================================
    # AUXILIARES
    # ==========================================

    def _get_announcement(self, school_id, announcement_id):
        announcement = self._find_announcement(school_id, announcement_id)
        if announcement is None:
            raise ServiceError(404, "The announcement does not exist")
        return announcement

    def _check_author(self, user, announcement, message):
        if not user.is_admin and announcement.created_by != user.user_id:
            raise ServiceError(403, message)

    def _check_tag(self, school_id, tag_id):
        result, _ = self.tables.tags.get(school_id, tag_id)
        expect(result, "get tag", NOT_FOUND=(404, "The tag does not exist"))

    def _files_json(self, school_id, file_ids):
        files = []
        for file_id in file_ids:
            result, row = self.tables.files.get(school_id, file_id)
            if result.code == ResultCode.NOT_FOUND:
                continue
            expect(result, "get file")
            files.append(row.to_json(secure=True))
        return files

    def _announcement_json(self, announcement):
        school_id = announcement.school_id
        value = announcement.to_json(secure=True)
        value["files"] = self._files_json(school_id, announcement.files)
        value["created_by_user_id"] = str(announcement.created_by)
        value["created_by_user_name"] = self._user_name(school_id, announcement.created_by)
        value["answers"] = self._answers_json(school_id, announcement.id, ANNOUNCEMENT)
        return value

    def _visible_to(self, user):
        """Anuncios de los tags del usuario más los que él mismo creó."""
        school_id = user.school_id
        ids = []
        for tag_id in self._members(self.tables.tags_by_user, school_id, user.user_id):
            ids += self._members(self.tables.announcements_by_tag, school_id, tag_id)

        announcements = {}
        for announcement_id in dict.fromkeys(ids):
            announcement = self._find_announcement(school_id, announcement_id)
            if announcement is None:
                logger.warning("Dangling announcement %s in school %s", announcement_id, school_id)
                continue
            announcements[announcement.id] = announcement

        result, own = self.tables.announcements.get_many("by_creator", school_id, user.user_id)
        for announcement in listing(result, own, "list own announcements"):
            announcements[announcement.id] = announcement
        return list(announcements.values())

    # ==========================================
    # ANUNCIOS
    # ==========================================

    @service_call
    def create_announcement(self, school_id, token, title, content, allow_answers=True, tag_ids=()):
        user = self._user_from_token(school_id, token)
        self._require_teacher(user, message="You are not allowed to create an announcement")
        if not title or len(title) > MAX_TITLE_LENGTH:
            raise ServiceError(400, "Invalid title")
        if not content:
            raise ServiceError(400, "Invalid content")
        for tag_id in tag_ids:
            self._check_tag(school_id, tag_id)

        announcement = Announcement(school_id, new_id(), now(), user.user_id, title, content,
                                    bool(allow_answers), [])
        expect(self.tables.announcements.create(announcement), "create announcement")
        for tag_id in tag_ids:
            tolerate(self.tables.announcements_by_tag.link(school_id, tag_id, announcement.id),
                     "add tag to announcement", ResultCode.NOT_APPLIED)

        response = announcement.to_json(secure=True)
        response["created_by_user_id"] = str(user.user_id)
        response["created_by_user_name"] = f"{user.first_name} {user.last_name}"
        return 201, response

    @service_call
    def get_announcements(self, school_id, token):
        user = self._user_from_token(school_id, token)

        # Marca de "visto por última vez" para resaltar anuncios nuevos
        result = self.tables.users.update((school_id, user.user_id), last_time_online=now())
        expect(result, "update last time online", NOT_APPLIED=(404, "The user does not exist"))

        if user.is_admin:
            result, announcements = self.tables.announcements.get_many("by_school", school_id)
            announcements = listing(result, announcements, "list announcements")
        else:
            announcements = self._visible_to(user)
        announcements.sort(key=lambda a: a.created_at, reverse=True)
        return 200, [self._announcement_json(a) for a in announcements]

    @service_call
    def get_announcement(self, school_id, token, announcement_id):
        user = self._user_from_token(school_id, token)
        announcement = self._get_announcement(school_id, announcement_id)
        self._check_announcement_access(school_id, user, announcement)
        return 200, self._announcement_json(announcement)

    @service_call
    def delete_announcement(self, school_id, token, announcement_id):
        user = self._user_from_token(school_id, token)
        announcement = self._get_announcement(school_id, announcement_id)
        self._check_author(user, announcement, "You are not allowed to delete this announcement")

        result = self.tables.announcements.delete(school_id, announcement_id, announcement.created_at)
        expect(result, "delete announcement", NOT_APPLIED=(404, "The announcement does not exist"))

        result, tag_ids = self.tables.announcements_by_tag.list_owners(school_id, announcement_id)
        expect(result, "list tags of announcement")
        for tag_id in tag_ids:
            tolerate(self.tables.announcements_by_tag.unlink(school_id, tag_id, announcement_id),
                     "remove announcement from tag", *GONE)
        self._delete_answers_of(school_id, announcement_id, ANNOUNCEMENT)
        self._delete_files(school_id, announcement.files)
        return 200, {}

    # ==========================================
    # TAGS DEL ANUNCIO
    # ==========================================

    @service_call
    def add_tag_to_announcement(self, school_id, token, announcement_id, tag_id):
        user = self._user_from_token(school_id, token)
        announcement = self._get_announcement(school_id, announcement_id)
        self._check_tag(school_id, tag_id)
        self._check_author(user, announcement, "You are not allowed to add tags to this announcement")

        result = self.tables.announcements_by_tag.link(school_id, tag_id, announcement_id)
        expect(result, "add tag to announcement",
               NOT_APPLIED=(409, "The tag is already added to the announcement"))
        return 200, {}

    @service_call
    def remove_tag_from_announcement(self, school_id, token, announcement_id, tag_id):
        user = self._user_from_token(school_id, token)
        announcement = self._get_announcement(school_id, announcement_id)
        self._check_tag(school_id, tag_id)
        self._check_author(user, announcement,
                           "You are not allowed to remove tags from this announcement")

        result = self.tables.announcements_by_tag.unlink(school_id, tag_id, announcement_id)
        expect(result, "remove tag from announcement",
               NOT_APPLIED=(404, "The tag is not added to the announcement"))
        return 200, {}

    @service_call
    def get_announcement_tags(self, school_id, token, announcement_id):
        user = self._user_from_token(school_id, token)
        announcement = self._get_announcement(school_id, announcement_id)
        self._check_author(user, announcement,
                           "You are not allowed to see the tags of this announcement")

        result, tag_ids = self.tables.announcements_by_tag.list_owners(school_id, announcement_id)
        expect(result, "list tags of announcement")
        tags = []
        for tag_id in tag_ids:
            result, tag = self.tables.tags.get(school_id, tag_id)
            if result.code == ResultCode.NOT_FOUND:
                continue
            expect(result, "get tag")
            tags.append(tag.to_json(secure=True))
        return 200, tags

    # ==========================================
    # RESPUESTAS
    # ==========================================

    @service_call
    def create_answer(self, school_id, token, announcement_id, content):
        user = self._user_from_token(school_id, token)
        announcement = self._get_announcement(school_id, announcement_id)
        self._check_announcement_access(school_id, user, announcement)
        if not announcement.allow_answers:
            raise ServiceError(403, "The announcement does not allow answers")
        return 201, self._create_answer(user, announcement_id, ANNOUNCEMENT, content)

    @service_call
    def get_answers(self, school_id, token, announcement_id):
        user = self._user_from_token(school_id, token)
        announcement = self._get_announcement(school_id, announcement_id)
        self._check_announcement_access(school_id, user, announcement)
        return 200, self._answers_json(school_id, announcement_id, ANNOUNCEMENT)

    @service_call
    def delete_answer(self, school_id, token, announcement_id, answer_id):
        user = self._user_from_token(school_id, token)
        self._get_announcement(school_id, announcement_id)
        self._remove_answer(user, announcement_id, ANNOUNCEMENT, answer_id)
        return 200, {}
