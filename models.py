"""
Project: Restaurant POS Admin Backend
Date: October 2026

Description:
Flask-SQLAlchemy models for the coded POS entities. Each entity carries a
unique code column named after its code field (printerCode, prepZoneCode,
...); the column is written once at creation and never updated.
"""

from flask_sqlalchemy import SQLAlchemy
from datetime import datetime

from codegen import Category

db = SQLAlchemy()

MAX_SAFE_INTEGER = 2 ** 53 - 1


def json_id(value):
    # ids past the JS safe-integer range go out as strings
    if value is not None and abs(value) > MAX_SAFE_INTEGER:
        return str(value)
    return value


class CodedMixin:
    """Audit columns shared by every coded entity."""
    is_active = db.Column("isActive", db.Integer, default=1)
    store_code = db.Column("storeCode", db.String(20), nullable=True)
    created_by = db.Column("createdBy", db.Integer, nullable=True)
    created_on = db.Column("createdOn", db.DateTime, default=datetime.utcnow)

    def _audit(self):
        return {
            "isActive": self.is_active,
            "storeCode": self.store_code,
            "createdBy": self.created_by,
            "createdOn": self.created_on.isoformat() if self.created_on else None,
        }


class Printer(CodedMixin, db.Model):
    __tablename__ = "printer"
    id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True)
    printer_code = db.Column("printerCode", db.String(20), unique=True, nullable=False)
    printer_name = db.Column("printerName", db.String(120), nullable=False)

    def to_dict(self):
        return {"id": json_id(self.id), "printerCode": self.printer_code,
                "printerName": self.printer_name, **self._audit()}


class PrepStation(CodedMixin, db.Model):
    __tablename__ = "prep_station"
    id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True)
    prep_station_code = db.Column("prepStationCode", db.String(20), unique=True, nullable=False)
    prep_station_name = db.Column("prepStationName", db.String(120), nullable=False)
    printer_code = db.Column("printerCode", db.String(20), nullable=True)

    def to_dict(self):
        return {"id": json_id(self.id), "prepStationCode": self.prep_station_code,
                "prepStationName": self.prep_station_name, "printerCode": self.printer_code,
                **self._audit()}


class PrepZone(CodedMixin, db.Model):
    __tablename__ = "prep_zone"
    id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True)
    prep_zone_code = db.Column("prepZoneCode", db.String(20), unique=True, nullable=False)
    prep_zone_name = db.Column("prepZoneName", db.String(120), nullable=False)
    station_code = db.Column("stationCode", db.String(20), nullable=True)
    send_to_expediter = db.Column("sendToExpediter", db.Integer, default=0)
    always_print_ticket = db.Column("alwaysPrintTicket", db.Integer, default=0)
    printer_code = db.Column("printerCode", db.String(20), nullable=True)
    backup_printer_code = db.Column("backupPrinterCode", db.String(20), nullable=True)

    def to_dict(self):
        return {
            "id": json_id(self.id),
            "prepZoneCode": self.prep_zone_code,
            "prepZoneName": self.prep_zone_name,
            "stationCode": self.station_code,
            "sendToExpediter": self.send_to_expediter,
            "alwaysPrintTicket": self.always_print_ticket,
            "printerCode": self.printer_code,
            "backupPrinterCode": self.backup_printer_code,
            **self._audit(),
        }


class Availability(CodedMixin, db.Model):
    __tablename__ = "availability"
    id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True)
    avai_code = db.Column("avaiCode", db.String(20), unique=True, nullable=False)
    avai_name = db.Column("avaiName", db.String(120), nullable=False)

    def to_dict(self):
        return {"id": json_id(self.id), "avaiCode": self.avai_code, "avaiName": self.avai_name,
                **self._audit()}


class MenuMaster(CodedMixin, db.Model):
    __tablename__ = "menu_master"
    id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True)
    menu_master_code = db.Column("menuMasterCode", db.String(20), unique=True, nullable=False)
    menu_master_name = db.Column("menuMasterName", db.String(120), nullable=False)

    def to_dict(self):
        return {"id": json_id(self.id), "menuMasterCode": self.menu_master_code,
                "menuMasterName": self.menu_master_name, **self._audit()}


class MenuCategory(CodedMixin, db.Model):
    __tablename__ = "menu_category"
    id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True)
    menu_category_code = db.Column("menuCategoryCode", db.String(20), unique=True, nullable=False)
    menu_category_name = db.Column("menuCategoryName", db.String(120), nullable=False)
    menu_master_code = db.Column("menuMasterCode", db.String(20), nullable=True)

    def to_dict(self):
        return {"id": json_id(self.id), "menuCategoryCode": self.menu_category_code,
                "menuCategoryName": self.menu_category_name,
                "menuMasterCode": self.menu_master_code, **self._audit()}


class MenuItem(CodedMixin, db.Model):
    __tablename__ = "menu_item"
    id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True)
    menu_item_code = db.Column("menuItemCode", db.String(20), unique=True, nullable=False)
    menu_item_name = db.Column("menuItemName", db.String(120), nullable=False)
    menu_category_code = db.Column("menuCategoryCode", db.String(20), nullable=True)
    price = db.Column(db.Float, nullable=False)

    def to_dict(self):
        return {"id": json_id(self.id), "menuItemCode": self.menu_item_code,
                "menuItemName": self.menu_item_name,
                "menuCategoryCode": self.menu_category_code, "price": self.price,
                **self._audit()}


class Tax(CodedMixin, db.Model):
    __tablename__ = "tax"
    id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True)
    tax_code = db.Column("taxCode", db.String(20), unique=True, nullable=False)
    tax_name = db.Column("taxName", db.String(120), nullable=False)
    tax_rate = db.Column("taxRate", db.Float, nullable=False)

    def to_dict(self):
        return {"id": json_id(self.id), "taxCode": self.tax_code, "taxName": self.tax_name,
                "taxRate": self.tax_rate, **self._audit()}


class ModifierGroup(CodedMixin, db.Model):
    __tablename__ = "modifier_group"
    id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True)
    modifier_group_code = db.Column("modifierGroupCode", db.String(20), unique=True, nullable=False)
    modifier_group_name = db.Column("modifierGroupName", db.String(120), nullable=False)
    min_select = db.Column("minSelect", db.Integer, default=0)
    max_select = db.Column("maxSelect", db.Integer, default=1)

    def to_dict(self):
        return {"id": json_id(self.id), "modifierGroupCode": self.modifier_group_code,
                "modifierGroupName": self.modifier_group_name, "minSelect": self.min_select,
                "maxSelect": self.max_select, **self._audit()}


class ModifierItem(CodedMixin, db.Model):
    __tablename__ = "modifier_item"
    id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True)
    modifier_item_code = db.Column("modifierItemCode", db.String(20), unique=True, nullable=False)
    modifier_item_name = db.Column("modifierItemName", db.String(120), nullable=False)
    modifier_group_code = db.Column("modifierGroupCode", db.String(20), nullable=True)
    price = db.Column(db.Float, default=0)
    # joined on the group code, there is no FK column
    group = db.relationship(
        "ModifierGroup",
        primaryjoin="foreign(ModifierItem.modifier_group_code) == ModifierGroup.modifier_group_code",
        viewonly=True,
        lazy=True,
    )

    def to_dict(self):
        return {
            "id": json_id(self.id),
            "modifierItemCode": self.modifier_item_code,
            "modifierItemName": self.modifier_item_name,
            "modifierGroupCode": self.modifier_group_code,
            "price": self.price,
            "modifier": self.group.to_dict() if self.group else None,
            **self._audit(),
        }


CODED_MODELS = {
    Category.AVAILABILITY: Availability,
    Category.MENU_MASTER: MenuMaster,
    Category.MENU_CATEGORY: MenuCategory,
    Category.MENU_ITEM: MenuItem,
    Category.PREP_ZONE: PrepZone,
    Category.PREP_STATION: PrepStation,
    Category.PRINTER: Printer,
    Category.TAX: Tax,
    Category.MODIFIER_GROUP: ModifierGroup,
    Category.MODIFIER_ITEM: ModifierItem,
}
