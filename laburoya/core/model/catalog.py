# Rubros y puestos ofrecidos a los clientes para Mar del Plata.
# El motor de matching no los valida: compara rubro y puesto por igualdad exacta.
JOB_CATEGORIES = {
    "gastronomia": {
        "label": "Gastronomía",
        "puestos": ["Cocinero", "Ayudante de cocina", "Mozo", "Bachero", "Barman"],
    },
    "comercio": {
        "label": "Comercio",
        "puestos": ["Vendedor", "Cajero", "Repositor", "Encargado"],
    },
    "construccion": {
        "label": "Construcción",
        "puestos": ["Albañil", "Ayudante", "Electricista", "Plomero", "Pintor"],
    },
    "limpieza": {
        "label": "Limpieza",
        "puestos": ["Empleada doméstica", "Personal de limpieza", "Mucama"],
    },
    "transporte": {
        "label": "Transporte",
        "puestos": ["Chofer", "Repartidor", "Fletero"],
    },
    "administracion": {
        "label": "Administración",
        "puestos": ["Administrativo", "Recepcionista", "Secretaria", "Data entry"],
    },
}

ZONAS_MDP = [
    "Centro",
    "La Perla",
    "Güemes",
    "Punta Mogotes",
    "Puerto",
    "Constitución",
    "San Juan",
    "Los Troncos",
    "Otras",
]
