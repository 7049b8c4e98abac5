# Shared WKT definitions for the CRS tests.

ETRS89_LAEA = (
    'PROJCS["ETRS89 / LAEA Europe",'
    'GEOGCS["ETRS89",DATUM["European_Terrestrial_Reference_System_1989",'
    'SPHEROID["GRS 1980",6378137,298.257222101,AUTHORITY["EPSG","7019"]],AUTHORITY["EPSG","6258"]],'
    'PRIMEM["Greenwich",0,AUTHORITY["EPSG","8901"]],'
    'UNIT["degree",0.01745329251994328,AUTHORITY["EPSG","9122"]],AUTHORITY["EPSG","4258"]],'
    'UNIT["metre",1,AUTHORITY["EPSG","9001"]],'
    'PROJECTION["Lambert_Azimuthal_Equal_Area"],'
    'PARAMETER["latitude_of_center",52],PARAMETER["longitude_of_center",10],'
    'PARAMETER["false_easting",4321000],PARAMETER["false_northing",3210000],'
    'AUTHORITY["EPSG","3035"]]'
)

ETRS89_UTM32 = (
    'PROJCS["ETRS89 / UTM zone 32N",'
    'GEOGCS["ETRS89",DATUM["European_Terrestrial_Reference_System_1989",'
    'SPHEROID["GRS 1980",6378137,298.257222101,AUTHORITY["EPSG","7019"]],'
    'TOWGS84[0,0,0,0,0,0,0],AUTHORITY["EPSG","6258"]],'
    'PRIMEM["Greenwich",0,AUTHORITY["EPSG","8901"]],'
    'UNIT["degree",0.0174532925199433,AUTHORITY["EPSG","9122"]],AUTHORITY["EPSG","4258"]],'
    'UNIT["metre",1,AUTHORITY["EPSG","9001"]],'
    'PROJECTION["Transverse_Mercator"],'
    'PARAMETER["latitude_of_origin",0],PARAMETER["central_meridian",9],'
    'PARAMETER["scale_factor",0.9996],PARAMETER["false_easting",500000],PARAMETER["false_northing",0],'
    'AXIS["Easting",EAST],AXIS["Northing",NORTH],AUTHORITY["EPSG","25832"]]'
)

NAD83_UTM10 = (
    'PROJCS["NAD83 / UTM zone 10N",'
    'GEOGCS["NAD83",DATUM["North_American_Datum_1983",'
    'SPHEROID["GRS 1980",6378137,298.257222101,AUTHORITY["EPSG","7019"]],'
    'TOWGS84[0,0,0,0,0,0,0],AUTHORITY["EPSG","6269"]],'
    'PRIMEM["Greenwich",0,AUTHORITY["EPSG","8901"]],'
    'UNIT["degree",0.0174532925199433,AUTHORITY["EPSG","9122"]],AUTHORITY["EPSG","4269"]],'
    'PROJECTION["Transverse_Mercator"],'
    'PARAMETER["latitude_of_origin",0],PARAMETER["central_meridian",-123],'
    'PARAMETER["scale_factor",0.9996],PARAMETER["false_easting",500000],PARAMETER["false_northing",0],'
    'UNIT["metre",1,AUTHORITY["EPSG","9001"]],'
    'AXIS["Easting",EAST],AXIS["Northing",NORTH],AUTHORITY["EPSG","26910"]]'
)

DHDN_GK3 = (
    'PROJCS["DHDN / Gauss-Kruger zone 3", GEOGCS["DHDN", DATUM["Deutsches_Hauptdreiecksnetz", '
    'SPHEROID["Bessel 1841", 6377397.155, 299.1528128, AUTHORITY["EPSG", "7004"]], '
    'TOWGS84[612.4, 77, 440.2, -0.054, 0.057, -2.797, 0.525975255930096], AUTHORITY["EPSG", "6314"]], '
    'PRIMEM["Greenwich", 0, AUTHORITY["EPSG", "8901"]], '
    'UNIT["degree", 0.0174532925199433, AUTHORITY["EPSG", "9122"]], AUTHORITY["EPSG", "4314"]], '
    'UNIT["metre", 1, AUTHORITY["EPSG", "9001"]], PROJECTION["Transverse_Mercator"], '
    'PARAMETER["latitude_of_origin", 0], PARAMETER["central_meridian", 9], PARAMETER["scale_factor", 1], '
    'PARAMETER["false_easting", 3500000], PARAMETER["false_northing", 0], AUTHORITY["EPSG", "31467"]]'
)

AFFINE_MT = (
    'PARAM_MT["Affine", PARAMETER["num_row",3], PARAMETER["num_col",3], '
    'PARAMETER["elt_0_0", 0.883485346527455], PARAMETER["elt_0_1", -0.468458794848877], '
    'PARAMETER["elt_0_2", 3455869.17937689], PARAMETER["elt_1_0", 0.468458794848877], '
    'PARAMETER["elt_1_1", 0.883485346527455], PARAMETER["elt_1_2", 5478710.88035753], '
    'PARAMETER["elt_2_2", 1],]'
)

FITTED_MNAU = (
    'FITTED_CS["Local coordinate system MNAU (based on Gauss-Krueger)", '
    + AFFINE_MT + ", " + DHDN_GK3 + ', AUTHORITY["CUSTOM","12345"]]'
)

__all__ = ["ETRS89_LAEA", "ETRS89_UTM32", "NAD83_UTM10", "DHDN_GK3", "AFFINE_MT", "FITTED_MNAU"]
