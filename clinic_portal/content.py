"""Static marketing content and the (backend-less) contact form."""
from __future__ import annotations
import logging
from typing import Literal
from pydantic import BaseModel
from .config import CLINIC_NAME

logger = logging.getLogger(__name__)


class ServiceCard(BaseModel):
    name: str
    description: str
    duration: int  # minutes
    price: int  # USD

    @property
    def badge(self) -> str:
        return f"{self.duration} min | ${self.price}"


class FaqEntry(BaseModel):
    question: str
    answer: str


class Specialty(BaseModel):
    name: str
    description: str


HERO = {
    "title": "Tu salud es nuestra prioridad",
    "subtitle": "Ofrecemos atención médica de alta calidad con un equipo de profesionales dedicados a tu bienestar.",
    "cta": {"label": "Reservar una cita", "target": "contact"},
}

SPECIALTIES = [
    Specialty(name="Neurocirugía", description="Expertos en el diagnóstico y tratamiento quirúrgico de enfermedades del cerebro, columna vertebral y sistema nervioso."),
    Specialty(name="Cardiología", description="Cuidado integral del corazón, prevención, diagnóstico y tratamiento de afecciones cardiovasculares."),
    Specialty(name="Medicina General", description="Atención primaria de salud, diagnósticos, tratamientos y seguimiento para toda la familia."),
]

ABOUT = (
    "Fundada en 2010, nuestra clínica ha crecido para convertirse en un referente de salud en la comunidad, "
    "comprometidos con la excelencia y el trato humano."
)

FAQ = [
    FaqEntry(
        question="¿Cómo puedo agendar una cita?",
        answer="Puedes agendar una cita llamándonos directamente a nuestro número de teléfono, o utilizando el formulario de contacto en nuestra sección de 'Contacto' y nos pondremos en contacto contigo.",
    ),
    FaqEntry(
        question="¿Aceptan seguros médicos?",
        answer="Sí, trabajamos con una amplia variedad de seguros médicos. Te recomendamos contactarnos o revisar nuestra sección de 'Servicios' para confirmar si tu seguro es compatible.",
    ),
    FaqEntry(
        question="¿Cuáles son sus horarios de atención?",
        answer="Nuestros horarios de atención son de Lunes a Viernes de 8:00 AM a 6:00 PM, y Sábados de 9:00 AM a 1:00 PM. Los Domingos estamos cerrados.",
    ),
    FaqEntry(
        question="¿Qué debo llevar a mi primera consulta?",
        answer="Para tu primera consulta, te pedimos que traigas tu identificación oficial, tu tarjeta de seguro (si aplica) y cualquier historial médico relevante o resultados de exámenes previos.",
    ),
]

SERVICES = [
    ServiceCard(name="Consulta General", duration=30, price=50,
                description="Atención médica integral para toda la familia, diagnósticos precisos, prevención y manejo efectivo de enfermedades comunes."),
    ServiceCard(name="Pediatría", duration=45, price=65,
                description="Cuidado especializado y cariñoso para niños desde el nacimiento hasta la adolescencia, incluyendo vacunas y controles de desarrollo."),
    ServiceCard(name="Cardiología", duration=60, price=120,
                description="Diagnóstico avanzado y tratamiento de enfermedades del corazón y del sistema circulatorio, con tecnología de punta."),
    ServiceCard(name="Dermatología", duration=40, price=80,
                description="Cuidado integral de la piel, cabello y uñas. Tratamiento de afecciones dermatológicas y soluciones estéticas."),
    ServiceCard(name="Nutrición", duration=45, price=70,
                description="Asesoramiento personalizado para una alimentación saludable, control de peso y manejo de condiciones dietéticas específicas."),
    ServiceCard(name="Fisioterapia", duration=60, price=95,
                description="Rehabilitación y terapia física avanzada para recuperar la movilidad, reducir el dolor y mejorar tu calidad de vida."),
]

CONTACT = {
    "phone": "+1 (555) 123-4567",
    "email": "info@clinicavidaySalud.com",
    "address": ["123 Calle Principal, Colonia Saludable", "Ciudad, Código Postal, País"],
    "hours": {
        "Lunes a Viernes": "8:00 AM - 6:00 PM",
        "Sábados": "9:00 AM - 1:00 PM",
        "Domingos": "Cerrado",
    },
    "emergency": "Si se trata de una emergencia médica, por favor, llame al 911 o acuda a la sala de emergencias más cercana.",
    "social": {
        "facebook": "https://facebook.com/clinicavidaySalud",
        "instagram": "https://instagram.com/clinicavidaySalud",
        "linkedin": "https://linkedin.com/company/clinicavidaySalud",
    },
}

FLOATING_LINKS = {
    "whatsapp": "https://wa.me/numerodetelefono",
    "facebook": "https://facebook.com/pagina",
    "maps": "https://maps.google.com/?q=direccion",
}


def home_page() -> dict:
    return {
        "hero": HERO,
        "specialties": [s.model_dump() for s in SPECIALTIES],
        "about": ABOUT,
        "faq": faq_page()["entries"],
    }


def services_page() -> dict:
    return {
        "title": "Nuestros Servicios",
        "intro": f"En {CLINIC_NAME}, nos dedicamos a ofrecer una amplia gama de servicios médicos de alta calidad, "
                 "centrados en tu bienestar y recuperación.",
        "services": [{**s.model_dump(), "badge": s.badge} for s in SERVICES],
    }


def contact_page() -> dict:
    return {"title": "Contáctanos", **CONTACT}


def faq_page() -> dict:
    return {"title": "Preguntas Frecuentes", "entries": [f.model_dump() for f in FAQ]}


PAGES = {
    "home": home_page,
    "services": services_page,
    "contact": contact_page,
    "faq": faq_page,
}


class ContactForm:
    """Contact form state. Messages are logged; there is no endpoint for them."""

    required = ("name", "email", "message")

    def __init__(self):
        self.reset()
        self.status: Literal["idle", "success", "error"] = "idle"

    def reset(self) -> None:
        self.name = ""
        self.email = ""
        self.phone = ""
        self.message = ""

    def submit(self) -> str:
        self.status = "idle"
        if any(not getattr(self, field).strip() for field in self.required):
            self.status = "error"
            return self.status
        logger.info("Contact message from %s <%s>: %s", self.name, self.email, self.message)
        self.reset()
        self.status = "success"
        return self.status
