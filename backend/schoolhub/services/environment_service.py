"""
Países, escuelas y feriados.

Los ids de país y escuela son el menor entero positivo libre; dos altas
concurrentes pueden calcular el mismo id y la segunda inserción queda
NOT_APPLIED, que se devuelve como 409 para que el cliente reintente.
"""
import logging

from schoolhub.cql.result import ResultCode
from schoolhub.models import Country, Holiday, HolidayType, School
from schoolhub.services.base import (
    BaseService, ServiceError, expect, internal_error, listing, service_call,
)

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 50


def valid_name(name):
    if not name or len(name) > MAX_NAME_LENGTH:
        return False
    return all(c.isalnum() or c in " -" for c in name)


def valid_code(code):
    return bool(code) and len(code) <= MAX_NAME_LENGTH and code.isalpha()


def smallest_free_id(used):
    candidate = 1
    while candidate in used:
        candidate += 1
    return candidate


class EnvironmentService(BaseService):

    # ==========================================
    # AUXILIARES
    # ==========================================

    def _all(self, table, operation):
        result, rows = table.get_many("all")
        return listing(result, rows, operation)

    def _generate_id(self, table, operation):
        return smallest_free_id({row.id for row in self._all(table, operation)})

    def _check_name(self, table, name, message, exclude_id=None):
        if not valid_name(name):
            raise ServiceError(400, message)
        for row in self._all(table, f"list {table.spec.name}"):
            if row.name == name and row.id != exclude_id:
                raise ServiceError(400, message)

    def _check_code(self, code, exclude_id=None):
        if not valid_code(code):
            raise ServiceError(400, "Invalid country code")
        for country in self._all(self.tables.countries, "list countries"):
            if country.code == code and country.id != exclude_id:
                raise ServiceError(400, "Invalid country code")

    def _check_country_id(self, country_id):
        if not isinstance(country_id, int) or country_id <= 0:
            raise ServiceError(400, "Invalid country id")
        result, _ = self.tables.countries.get(country_id)
        expect(result, "get country", NOT_FOUND=(400, "Invalid country id"))

    def _get_school(self, school_id):
        result, school = self.tables.schools.get(school_id)
        expect(result, "get school", NOT_FOUND=(404, "School not found"))
        return school

    def _get_country(self, country_id):
        result, country = self.tables.countries.get(country_id)
        expect(result, "get country", NOT_FOUND=(404, "Country not found"))
        return country

    def _holidays_of(self, owner_id, holiday_type):
        result, holidays = self.tables.holidays.get_many("by_owner", owner_id, holiday_type)
        return listing(result, holidays, "list holidays")

    # ==========================================
    # ESCUELAS
    # ==========================================

    @service_call
    def create_school(self, name, country_id, image_path=""):
        self._check_name(self.tables.schools, name, "Invalid school name")
        self._check_country_id(country_id)

        school_id = self._generate_id(self.tables.schools, "generate school id")
        result = self.tables.schools.create(School(school_id, name, country_id, image_path or ""))
        expect(result, "create school", NOT_APPLIED=(409, "Id conflict, please retry"))
        logger.info("School %s created (%s)", school_id, name)
        return 201, {"id": school_id}

    @service_call
    def get_school(self, school_id):
        return 200, self._get_school(school_id).to_json()

    @service_call
    def get_all_schools(self):
        schools = self._all(self.tables.schools, "list schools")
        return 200, [s.to_json() for s in sorted(schools, key=lambda s: s.id)]

    @service_call
    def update_school(self, school_id, name, country_id, image_path=""):
        self._check_name(self.tables.schools, name, "Invalid school name", exclude_id=school_id)
        self._check_country_id(country_id)

        if not image_path:
            image_path = self._get_school(school_id).image_path

        result = self.tables.schools.update(
            (school_id,), name=name, country_id=country_id, image_path=image_path)
        expect(result, "update school", NOT_APPLIED=(404, "School not found"))
        return 200, {}

    @service_call
    def delete_school(self, school_id):
        result = self.tables.schools.delete(school_id)
        expect(result, "delete school", NOT_APPLIED=(404, "School not found"))

        result = self.tables.holidays.delete_many("by_owner", school_id, HolidayType.CUSTOM)
        expect(result, f"delete custom holidays of school {school_id}")
        logger.info("School %s deleted", school_id)
        return 200, {}

    # ==========================================
    # PAÍSES
    # ==========================================

    @service_call
    def create_country(self, name, code):
        self._check_name(self.tables.countries, name, "Invalid country name")
        self._check_code(code)

        country_id = self._generate_id(self.tables.countries, "generate country id")
        result = self.tables.countries.create(Country(country_id, name, code))
        expect(result, "create country", NOT_APPLIED=(409, "Id conflict, please retry"))
        logger.info("Country %s created (%s)", country_id, code)
        return 201, {"id": country_id}

    @service_call
    def get_country(self, country_id):
        return 200, self._get_country(country_id).to_json()

    @service_call
    def get_all_countries(self):
        countries = self._all(self.tables.countries, "list countries")
        return 200, [c.to_json() for c in sorted(countries, key=lambda c: c.id)]

    @service_call
    def update_country(self, country_id, name, code):
        self._get_country(country_id)
        self._check_name(self.tables.countries, name, "Invalid country name", exclude_id=country_id)
        self._check_code(code, exclude_id=country_id)

        result = self.tables.countries.update((country_id,), name=name, code=code)
        expect(result, "update country", NOT_APPLIED=(404, "Country not found"))
        return 200, {}

    @service_call
    def delete_country(self, country_id):
        """
        Borra el país, sus feriados nacionales y todas sus escuelas.
        El primer fallo corta la cascada; lo ya borrado no se restaura.
        """
        result = self.tables.countries.delete(country_id)
        expect(result, "delete country", NOT_APPLIED=(404, "Country not found"))

        result = self.tables.holidays.delete_many("by_owner", country_id, HolidayType.NATIONAL)
        expect(result, f"delete national holidays of country {country_id}")

        schools = self._all(self.tables.schools, "list schools")
        for school in sorted(schools, key=lambda s: s.id):
            if school.country_id != country_id:
                continue
            response = self.delete_school(school.id)
            if response.status != 200:
                logger.error("Country %s cascade stopped at school %s (%s)",
                             country_id, school.id, response.status)
                return response
        logger.info("Country %s deleted", country_id)
        return 200, {}

    # ==========================================
    # FERIADOS
    # ==========================================

    def _holiday_type(self, holiday_type):
        try:
            return HolidayType(holiday_type)
        except ValueError:
            raise ServiceError(400, "Invalid holiday type") from None

    def _check_holiday_owner(self, owner_id, holiday_type):
        if holiday_type == HolidayType.NATIONAL:
            return self._get_country(owner_id)
        return self._get_school(owner_id)

    @service_call
    def create_holiday(self, owner_id, holiday_type, date, name):
        holiday_type = self._holiday_type(holiday_type)
        if not name or len(name) > MAX_NAME_LENGTH:
            raise ServiceError(400, "Invalid holiday name")
        self._check_holiday_owner(owner_id, holiday_type)

        result = self.tables.holidays.create(Holiday(owner_id, holiday_type, date, name))
        expect(result, "create holiday", NOT_APPLIED=(409, "Holiday already exists"))
        return 201, {}

    @service_call
    def get_holidays(self, owner_id, holiday_type):
        """Para una escuela: sus feriados propios más los nacionales de su país."""
        holiday_type = self._holiday_type(holiday_type)
        owner = self._check_holiday_owner(owner_id, holiday_type)

        holidays = self._holidays_of(owner_id, holiday_type)
        if holiday_type == HolidayType.CUSTOM:
            holidays += self._holidays_of(owner.country_id, HolidayType.NATIONAL)
        holidays.sort(key=lambda h: h.date)
        return 200, [h.to_json() for h in holidays]

    @service_call
    def update_holiday(self, owner_id, holiday_type, old_date, new_date=None, name=None):
        """
        La fecha es clave de agrupamiento: cambiarla es borrar el registro
        viejo e insertar el nuevo. Si el insert falla después del borrado el
        feriado se pierde; se registra en el log con todos sus datos.
        """
        holiday_type = self._holiday_type(holiday_type)
        result, old = self.tables.holidays.get(owner_id, holiday_type, old_date)
        expect(result, "get holiday", NOT_FOUND=(404, "Holiday not found"))

        name = old.name if name is None else name
        if not name or len(name) > MAX_NAME_LENGTH:
            raise ServiceError(400, "Invalid holiday name")

        if new_date is None or new_date == old.date:
            result = self.tables.holidays.update((owner_id, holiday_type, old.date), name=name)
            expect(result, "update holiday", NOT_APPLIED=(404, "Holiday not found"))
            return 200, {}

        result, _ = self.tables.holidays.get(owner_id, holiday_type, new_date)
        if result.ok:
            raise ServiceError(409, "Holiday already exists")
        if result.code != ResultCode.NOT_FOUND:
            raise internal_error("check new holiday date", result)

        new = Holiday(owner_id, holiday_type, new_date, name)
        result = self.tables.holidays.delete(owner_id, holiday_type, old.date)
        expect(result, "delete old holiday", NOT_APPLIED=(404, "Holiday not found"))

        result = self.tables.holidays.create(new)
        if not result.ok:
            logger.error("Holiday lost while moving %s -> %s: %r (%s)",
                         old.date, new_date, new, result)
            raise internal_error("insert moved holiday", result)
        return 200, new.to_json()

    @service_call
    def delete_holiday(self, owner_id, holiday_type, date):
        holiday_type = self._holiday_type(holiday_type)
        result = self.tables.holidays.delete(owner_id, holiday_type, date)
        expect(result, "delete holiday", NOT_APPLIED=(404, "Holiday not found"))
        return 200, {}

    @service_call
    def delete_holidays(self, owner_id, holiday_type):
        holiday_type = self._holiday_type(holiday_type)
        result = self.tables.holidays.delete_many("by_owner", owner_id, holiday_type)
        expect(result, "delete holidays")
        return 200, {}
