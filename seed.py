from codegen import Category, TARGETS
from models import db, Printer, PrepStation, PrepZone, Tax, ModifierGroup, ModifierItem
from app import create_app

app = create_app()


def code_for(category):
    return app.extensions["codegen"].generate(category, TARGETS[category].field_name)


def add(row):
    # commit each row so the next generated code sees it
    db.session.add(row)
    db.session.commit()
    return row


with app.app_context():
    db.create_all()
    store = app.config.get("STORE_CODE")

    if Printer.query.count() == 0:
        for name in ("Kitchen Printer", "Bar Printer"):
            add(Printer(printer_code=code_for(Category.PRINTER), printer_name=name, store_code=store))

    if PrepStation.query.count() == 0:
        kitchen = Printer.query.filter_by(printer_name="Kitchen Printer").first()
        add(PrepStation(prep_station_code=code_for(Category.PREP_STATION), prep_station_name="Hot Line",
                        printer_code=kitchen.printer_code if kitchen else None, store_code=store))

    if PrepZone.query.count() == 0:
        for name in ("Grill", "Fryer", "Cold Prep"):
            add(PrepZone(prep_zone_code=code_for(Category.PREP_ZONE), prep_zone_name=name, store_code=store))

    if Tax.query.count() == 0:
        add(Tax(tax_code=code_for(Category.TAX), tax_name="GST 5%", tax_rate=5.0, store_code=store))
        add(Tax(tax_code=code_for(Category.TAX), tax_name="GST 18%", tax_rate=18.0, store_code=store))

    if ModifierGroup.query.count() == 0:
        group = add(ModifierGroup(modifier_group_code=code_for(Category.MODIFIER_GROUP),
                                  modifier_group_name="Spice Level", min_select=1, max_select=1,
                                  store_code=store))
        for name in ("Mild", "Medium", "Hot"):
            add(ModifierItem(modifier_item_code=code_for(Category.MODIFIER_ITEM), modifier_item_name=name,
                             modifier_group_code=group.modifier_group_code, store_code=store))

    print("Seeded printers, prep stations, prep zones, taxes and modifiers.")
