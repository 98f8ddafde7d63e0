from flask import Blueprint

from schoolhub.routes.common import api_route, body, context, field, int_arg, respond

environment_bp = Blueprint('environment', __name__)


# --- ESCUELAS ---
@environment_bp.route('/schools', methods=['POST'])
@api_route
def create_school():
    """
    Body: {"name": "Colegio Nacional", "country_id": 1, "image_path": ""}
    """
    data = body()
    result = context().environment.create_school(
        field(data, "name", str),
        field(data, "country_id", int),
        field(data, "image_path", str, required=False, default=""),
    )
    return respond(result)


@environment_bp.route('/schools', methods=['GET'])
@api_route
def get_schools():
    return respond(context().environment.get_all_schools())


@environment_bp.route('/schools/<int:school_id>', methods=['GET'])
@api_route
def get_school(school_id):
    return respond(context().environment.get_school(school_id))


@environment_bp.route('/schools/<int:school_id>', methods=['PUT'])
@api_route
def update_school(school_id):
    data = body()
    result = context().environment.update_school(
        school_id,
        field(data, "name", str),
        field(data, "country_id", int),
        field(data, "image_path", str, required=False, default=""),
    )
    return respond(result)


@environment_bp.route('/schools/<int:school_id>', methods=['DELETE'])
@api_route
def delete_school(school_id):
    return respond(context().environment.delete_school(school_id))


# --- PAÍSES ---
@environment_bp.route('/countries', methods=['POST'])
@api_route
def create_country():
    """
    Body: {"name": "Romania", "code": "RO"}
    """
    data = body()
    result = context().environment.create_country(field(data, "name", str), field(data, "code", str))
    return respond(result)


@environment_bp.route('/countries', methods=['GET'])
@api_route
def get_countries():
    return respond(context().environment.get_all_countries())


@environment_bp.route('/countries/<int:country_id>', methods=['GET'])
@api_route
def get_country(country_id):
    return respond(context().environment.get_country(country_id))


@environment_bp.route('/countries/<int:country_id>', methods=['PUT'])
@api_route
def update_country(country_id):
    data = body()
    result = context().environment.update_country(
        country_id, field(data, "name", str), field(data, "code", str))
    return respond(result)


@environment_bp.route('/countries/<int:country_id>', methods=['DELETE'])
@api_route
def delete_country(country_id):
    """Borra el país, sus feriados y todas sus escuelas."""
    return respond(context().environment.delete_country(country_id))


# --- FERIADOS ---
@environment_bp.route('/holidays', methods=['POST'])
@api_route
def create_holiday():
    """
    Body: {"id": 1, "type": 0, "date": 1703462400, "name": "Christmas"}
    type: 0 = nacional (id de país), 1 = propio de la escuela (id de escuela)
    """
    data = body()
    result = context().environment.create_holiday(
        field(data, "id", int),
        field(data, "type", int),
        field(data, "date", int),
        field(data, "name", str),
    )
    return respond(result)


@environment_bp.route('/holidays', methods=['GET'])
@api_route
def get_holidays():
    """Query: ?id=1&type=1"""
    return respond(context().environment.get_holidays(int_arg("id"), int_arg("type")))


@environment_bp.route('/holidays', methods=['PUT'])
@api_route
def update_holiday():
    """
    Body: {"id": 1, "type": 0, "date": 1703462400, "new_date": 1703548800, "name": "..."}
    """
    data = body()
    result = context().environment.update_holiday(
        field(data, "id", int),
        field(data, "type", int),
        field(data, "date", int),
        new_date=field(data, "new_date", int, required=False),
        name=field(data, "name", str, required=False),
    )
    return respond(result)


@environment_bp.route('/holidays', methods=['DELETE'])
@api_route
def delete_holiday():
    """Query: ?id=1&type=0&date=1703462400; sin date borra todos los de ese tipo."""
    owner_id, holiday_type = int_arg("id"), int_arg("type")
    date = int_arg("date", required=False)
    if date is None:
        return respond(context().environment.delete_holidays(owner_id, holiday_type))
    return respond(context().environment.delete_holiday(owner_id, holiday_type, date))
