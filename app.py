"""
Project: Restaurant POS Admin Backend
Date: October 2026

Description:
Main application entry point. Initializes Flask, database, and Socket.IO and
registers the admin routes for coded POS entities (printers, prep zones,
prep stations, availability, menus, taxes, modifiers). Every create route
asks the code generator for a fresh code, inserts the row and retries when
the insert hits the unique code constraint.
"""

import logging

from flask import Flask, request, jsonify, session
from flask_socketio import SocketIO
from sqlalchemy.exc import IntegrityError

from codegen import Category, CodeGenerationError, UnknownCategory, TARGETS, build_generator
from config import Config
from lookup import SqlRecordLookup
from models import (
    db, json_id, CODED_MODELS, Printer, PrepZone, PrepStation, Availability, MenuMaster,
    MenuCategory, MenuItem, Tax, ModifierGroup, ModifierItem,
)

# Create SocketIO once (no app yet), then bind inside factory
socketio = SocketIO(cors_allowed_origins="*")


# --------- body parsers ---------
def _text(value):
    if value is None or not str(value).strip():
        raise ValueError("is required")
    return str(value).strip()


def _optional(value):
    return value or None


def _flag(value):
    return 1 if value else 0


def _number(cast):
    def parse(value):
        try:
            return cast(value)
        except (TypeError, ValueError):
            raise ValueError("must be a number") from None
    return parse


_int = _number(int)
_float = _number(float)

# JSON key -> (attribute, parser) accepted on update. Code columns are
# never listed: a code is fixed once the row exists.
EDITABLE = {
    Printer: {
        "printerName": ("printer_name", _text),
        "isActive": ("is_active", _flag),
    },
    PrepZone: {
        "prepZoneName": ("prep_zone_name", _text),
        "stationCode": ("station_code", _optional),
        "sendToExpediter": ("send_to_expediter", _flag),
        "alwaysPrintTicket": ("always_print_ticket", _flag),
        "printerCode": ("printer_code", _optional),
        "backupPrinterCode": ("backup_printer_code", _optional),
        "isActive": ("is_active", _flag),
    },
    PrepStation: {
        "prepStationName": ("prep_station_name", _text),
        "printerCode": ("printer_code", _optional),
        "isActive": ("is_active", _flag),
    },
    Availability: {
        "avaiName": ("avai_name", _text),
        "isActive": ("is_active", _flag),
    },
    MenuMaster: {
        "menuMasterName": ("menu_master_name", _text),
        "isActive": ("is_active", _flag),
    },
    MenuCategory: {
        "menuCategoryName": ("menu_category_name", _text),
        "menuMasterCode": ("menu_master_code", _optional),
        "isActive": ("is_active", _flag),
    },
    MenuItem: {
        "menuItemName": ("menu_item_name", _text),
        "menuCategoryCode": ("menu_category_code", _optional),
        "price": ("price", _float),
        "isActive": ("is_active", _flag),
    },
    Tax: {
        "taxName": ("tax_name", _text),
        "taxRate": ("tax_rate", _float),
        "isActive": ("is_active", _flag),
    },
    ModifierGroup: {
        "modifierGroupName": ("modifier_group_name", _text),
        "minSelect": ("min_select", _int),
        "maxSelect": ("max_select", _int),
        "isActive": ("is_active", _flag),
    },
    ModifierItem: {
        "modifierItemName": ("modifier_item_name", _text),
        "modifierGroupCode": ("modifier_group_code", _optional),
        "price": ("price", _float),
        "isActive": ("is_active", _flag),
    },
}


def create_app(testing: bool = False):
    app = Flask(__name__)
    app.config.from_object(Config)

    if testing:
        app.config["TESTING"] = True
        app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite:///:memory:"
        app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
        app.config["SOCKETIO_ASYNC_MODE"] = "threading"

    level = getattr(logging, app.config["LOG_LEVEL"], logging.INFO)
    app.logger.setLevel(level)
    logging.getLogger("codegen").setLevel(level)

    db.init_app(app)
    socketio.init_app(app, async_mode=app.config["SOCKETIO_ASYNC_MODE"])

    # one generator per app; db.session is request scoped underneath
    app.extensions["codegen"] = build_generator(app.config, SqlRecordLookup(db.session, CODED_MODELS))

    # --------- helpers ---------
    def require_login():
        if not session.get("user_id"):
            return jsonify({"error": "login_required"}), 401

    def require_admin():
        if not session.get("user_id"):
            return jsonify({"error": "login_required"}), 401
        if session.get("role") not in app.config["ADMIN_ROLES"]:
            return jsonify({"error": "forbidden"}), 403

    def missing(data, *fields):
        for f in fields:
            value = data.get(f)
            if value is None or (isinstance(value, str) and not value.strip()):
                return jsonify({"error": f"{f} is required"}), 400

    def list_rows(model):
        resp = require_login()
        if resp:
            return resp
        rows = model.query.order_by(model.created_on.desc(), model.id.desc()).all()
        return jsonify([r.to_dict() for r in rows])

    def create_coded(category, build):
        """Generate a code, insert the row built by `build(code)`, retry on a code clash."""
        field = TARGETS[category].field_name
        generator = app.extensions["codegen"]
        retries = app.config["CODE_INSERT_RETRIES"]
        for attempt in range(1, retries + 1):
            code = generator.generate(category, field)
            row = build(code)
            row.store_code = app.config.get("STORE_CODE")
            row.created_by = session.get("user_id")
            db.session.add(row)
            try:
                db.session.commit()
            except IntegrityError:
                db.session.rollback()
                app.logger.warning("%s %s taken at insert (attempt %d/%d), regenerating",
                                   field, code, attempt, retries)
                continue
            app.logger.info("created %s %s", category.value, code)
            socketio.emit("event", {"type": f"{category.value}.created", "item": row.to_dict()})
            return jsonify(row.to_dict()), 201
        return jsonify({"error": "code_conflict", "category": category.value, "field": field,
                        "attempts": retries}), 409

    def number(data, key, parse, default):
        try:
            return parse(data.get(key, default)), None
        except ValueError as exc:
            return None, (jsonify({"error": f"{key} {exc}"}), 400)

    def read_fields(data, fields):
        attrs = {}
        for key, (attr, parse) in fields.items():
            if key not in data:
                continue
            try:
                attrs[attr] = parse(data[key])
            except ValueError as exc:
                return None, (jsonify({"error": f"{key} {exc}"}), 400)
        return attrs, None

    def group_missing(group_code):
        if group_code and not ModifierGroup.query.filter_by(modifier_group_code=group_code).first():
            return jsonify({"error": "modifier group not found"}), 404

    def register_detail(name, path, model, category):
        """GET / PUT / DELETE on one row. PUT never touches the code column."""

        def detail(row_id):
            resp = require_login() if request.method == "GET" else require_admin()
            if resp:
                return resp
            if request.method == "DELETE" and session.get("role") not in app.config["DELETE_ROLES"]:
                return jsonify({"error": "forbidden"}), 403
            row = db.get_or_404(model, row_id)

            if request.method == "GET":
                return jsonify(row.to_dict())

            if request.method == "DELETE":
                db.session.delete(row)
                db.session.commit()
                app.logger.info("deleted %s %s", category.value, row_id)
                socketio.emit("event", {"type": f"{category.value}.deleted", "id": json_id(row_id)})
                return jsonify({"ok": True})

            data = request.get_json(silent=True) or {}
            attrs, resp = read_fields(data, EDITABLE[model])
            if resp:
                return resp
            if model is ModifierItem:
                resp = group_missing(attrs.get("modifier_group_code"))
                if resp:
                    return resp
            for attr, value in attrs.items():
                setattr(row, attr, value)
            db.session.commit()
            socketio.emit("event", {"type": f"{category.value}.updated", "item": row.to_dict()})
            return jsonify(row.to_dict())

        app.add_url_rule(f"{path}/<int:row_id>", endpoint=f"{name}_detail", view_func=detail,
                         methods=["GET", "PUT", "DELETE"])

    @app.errorhandler(CodeGenerationError)
    def code_generation_failed(err):
        status = 500 if isinstance(err, UnknownCategory) else 503
        app.logger.error("code generation failed: %s", err)
        return jsonify(err.to_dict()), status

    # ---------- PRINTERS ----------
    @app.get("/api/printer")
    def list_printers():
        return list_rows(Printer)

    @app.post("/api/printer")
    def create_printer():
        resp = require_admin()
        if resp:
            return resp
        data = request.get_json(silent=True) or {}
        resp = missing(data, "printerName")
        if resp:
            return resp
        return create_coded(Category.PRINTER, lambda code: Printer(
            printer_code=code,
            printer_name=data["printerName"],
            is_active=_flag(data.get("isActive", True)),
        ))

    # ---------- PREP ZONES ----------
    @app.get("/api/menu/prep-zone")
    def list_prep_zones():
        return list_rows(PrepZone)

    @app.post("/api/menu/prep-zone")
    def create_prep_zone():
        resp = require_admin()
        if resp:
            return resp
        data = request.get_json(silent=True) or {}
        resp = missing(data, "prepZoneName")
        if resp:
            return resp
        return create_coded(Category.PREP_ZONE, lambda code: PrepZone(
            prep_zone_code=code,
            prep_zone_name=data["prepZoneName"],
            station_code=data.get("stationCode") or None,
            send_to_expediter=_flag(data.get("sendToExpediter")),
            always_print_ticket=_flag(data.get("alwaysPrintTicket")),
            printer_code=data.get("printerCode") or None,
            backup_printer_code=data.get("backupPrinterCode") or None,
            is_active=_flag(data.get("isActive", True)),
        ))

    # ---------- PREP STATIONS ----------
    @app.get("/api/station")
    def list_prep_stations():
        return list_rows(PrepStation)

    @app.post("/api/station")
    def create_prep_station():
        resp = require_admin()
        if resp:
            return resp
        data = request.get_json(silent=True) or {}
        resp = missing(data, "prepStationName")
        if resp:
            return resp
        return create_coded(Category.PREP_STATION, lambda code: PrepStation(
            prep_station_code=code,
            prep_station_name=data["prepStationName"],
            printer_code=data.get("printerCode") or None,
            is_active=_flag(data.get("isActive", True)),
        ))

    # ---------- AVAILABILITY ----------
    @app.get("/api/menu/availability")
    def list_availability():
        return list_rows(Availability)

    @app.post("/api/menu/availability")
    def create_availability():
        resp = require_admin()
        if resp:
            return resp
        data = request.get_json(silent=True) or {}
        resp = missing(data, "avaiName")
        if resp:
            return resp
        return create_coded(Category.AVAILABILITY, lambda code: Availability(
            avai_code=code,
            avai_name=data["avaiName"],
            is_active=_flag(data.get("isActive", True)),
        ))

    # ---------- MENU ----------
    @app.get("/api/menu/masters")
    def list_menu_masters():
        return list_rows(MenuMaster)

    @app.post("/api/menu/masters")
    def create_menu_master():
        resp = require_admin()
        if resp:
            return resp
        data = request.get_json(silent=True) or {}
        resp = missing(data, "menuMasterName")
        if resp:
            return resp
        return create_coded(Category.MENU_MASTER, lambda code: MenuMaster(
            menu_master_code=code,
            menu_master_name=data["menuMasterName"],
            is_active=_flag(data.get("isActive", True)),
        ))

    @app.get("/api/menu/categories")
    def list_menu_categories():
        return list_rows(MenuCategory)

    @app.post("/api/menu/categories")
    def create_menu_category():
        resp = require_admin()
        if resp:
            return resp
        data = request.get_json(silent=True) or {}
        resp = missing(data, "menuCategoryName")
        if resp:
            return resp
        return create_coded(Category.MENU_CATEGORY, lambda code: MenuCategory(
            menu_category_code=code,
            menu_category_name=data["menuCategoryName"],
            menu_master_code=data.get("menuMasterCode") or None,
            is_active=_flag(data.get("isActive", True)),
        ))

    @app.get("/api/menu/items")
    def list_menu_items():
        return list_rows(MenuItem)

    @app.post("/api/menu/items")
    def create_menu_item():
        resp = require_admin()
        if resp:
            return resp
        data = request.get_json(silent=True) or {}
        resp = missing(data, "menuItemName", "price")
        if resp:
            return resp
        price, resp = number(data, "price", _float, None)
        if resp:
            return resp
        return create_coded(Category.MENU_ITEM, lambda code: MenuItem(
            menu_item_code=code,
            menu_item_name=data["menuItemName"],
            menu_category_code=data.get("menuCategoryCode") or None,
            price=price,
            is_active=_flag(data.get("isActive", True)),
        ))

    # ---------- TAX ----------
    @app.get("/api/tax")
    def list_taxes():
        return list_rows(Tax)

    @app.post("/api/tax")
    def create_tax():
        resp = require_admin()
        if resp:
            return resp
        data = request.get_json(silent=True) or {}
        resp = missing(data, "taxName", "taxRate")
        if resp:
            return resp
        rate, resp = number(data, "taxRate", _float, None)
        if resp:
            return resp
        return create_coded(Category.TAX, lambda code: Tax(
            tax_code=code,
            tax_name=data["taxName"],
            tax_rate=rate,
            is_active=_flag(data.get("isActive", True)),
        ))

    # ---------- MODIFIERS ----------
    @app.get("/api/modifier-groups")
    def list_modifier_groups():
        return list_rows(ModifierGroup)

    @app.post("/api/modifier-groups")
    def create_modifier_group():
        resp = require_admin()
        if resp:
            return resp
        data = request.get_json(silent=True) or {}
        resp = missing(data, "modifierGroupName")
        if resp:
            return resp
        min_select, resp = number(data, "minSelect", _int, 0)
        if resp:
            return resp
        max_select, resp = number(data, "maxSelect", _int, 1)
        if resp:
            return resp
        return create_coded(Category.MODIFIER_GROUP, lambda code: ModifierGroup(
            modifier_group_code=code,
            modifier_group_name=data["modifierGroupName"],
            min_select=min_select,
            max_select=max_select,
            is_active=_flag(data.get("isActive", True)),
        ))

    @app.get("/api/modifier-items")
    def list_modifier_items():
        return list_rows(ModifierItem)

    @app.post("/api/modifier-items")
    def create_modifier_item():
        resp = require_admin()
        if resp:
            return resp
        data = request.get_json(silent=True) or {}
        resp = missing(data, "modifierItemName")
        if resp:
            return resp
        group_code = data.get("modifierGroupCode") or None
        resp = group_missing(group_code)
        if resp:
            return resp
        price, resp = number(data, "price", _float, 0)
        if resp:
            return resp
        return create_coded(Category.MODIFIER_ITEM, lambda code: ModifierItem(
            modifier_item_code=code,
            modifier_item_name=data["modifierItemName"],
            modifier_group_code=group_code,
            price=price,
            is_active=_flag(data.get("isActive", True)),
        ))

    # ---------- SINGLE ROWS ----------
    register_detail("printer", "/api/printer", Printer, Category.PRINTER)
    register_detail("prep_zone", "/api/menu/prep-zone", PrepZone, Category.PREP_ZONE)
    register_detail("prep_station", "/api/station", PrepStation, Category.PREP_STATION)
    register_detail("availability", "/api/menu/availability", Availability, Category.AVAILABILITY)
    register_detail("menu_master", "/api/menu/masters", MenuMaster, Category.MENU_MASTER)
    register_detail("menu_category", "/api/menu/categories", MenuCategory, Category.MENU_CATEGORY)
    register_detail("menu_item", "/api/menu/items", MenuItem, Category.MENU_ITEM)
    register_detail("tax", "/api/tax", Tax, Category.TAX)
    register_detail("modifier_group", "/api/modifier-groups", ModifierGroup, Category.MODIFIER_GROUP)
    register_detail("modifier_item", "/api/modifier-items", ModifierItem, Category.MODIFIER_ITEM)

    # ---------- HEALTH ----------
    @app.get("/api/health")
    def health():
        return jsonify({"status": "ok"})

    return app


# Create the real app object
app = create_app()

if __name__ == "__main__":
    with app.app_context():
        db.create_all()
    # Runs with eventlet server automatically
    socketio.run(app, host="0.0.0.0", port=5013, debug=True)
