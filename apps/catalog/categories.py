"""
Service categories for the marketplace.

The category tree is static: eight parent categories (ids 1-8) and
their subcategories (ids 101-805, parent id times 100 plus a position).
Names and descriptions are kept per locale.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional

from apps.core.i18n import FALLBACK_LOCALE, normalize_locale


@dataclass(frozen=True)
class Category:
    id: int
    parent_id: Optional[int]
    names: Dict[str, str]
    descriptions: Dict[str, str]

    @property
    def is_parent(self) -> bool:
        return self.parent_id is None

    def name(self, locale: Optional[str] = None) -> str:
        locale = normalize_locale(locale)
        return self.names.get(locale) or self.names[FALLBACK_LOCALE]

    def description(self, locale: Optional[str] = None) -> str:
        locale = normalize_locale(locale)
        return self.descriptions.get(locale) or self.descriptions.get(FALLBACK_LOCALE, "")


CATEGORIES: List[Category] = [
    Category(
        id=1,
        parent_id=None,
        names={"en": "House Cleaning", "fr": "Nettoyage de maison", "ar": "تنظيف المنزل", "de": "Hausreinigung"},
        descriptions={
            "en": "Professional cleaning services for your home",
            "fr": "Services de nettoyage professionnel pour votre maison",
            "ar": "خدمات تنظيف مهنية لمنزلك",
            "de": "Professionelle Reinigungsdienste für Ihr Zuhause",
        },
    ),
    Category(
        id=2,
        parent_id=None,
        names={"en": "Handyman Services", "fr": "Services de bricolage", "ar": "خدمات السباكة والكهرباء", "de": "Handwerkerdienste"},
        descriptions={
            "en": "Skilled professionals for all your home repairs",
            "fr": "Professionnels qualifiés pour toutes vos réparations",
            "ar": "محترفون مهرة لجميع إصلاحات منزلك",
            "de": "Qualifizierte Fachkräfte für alle Ihre Hausreparaturen",
        },
    ),
    Category(
        id=3,
        parent_id=None,
        names={"en": "Gardening", "fr": "Jardinage", "ar": "البستنة", "de": "Gartenarbeit"},
        descriptions={
            "en": "Beautiful gardens and landscaping services",
            "fr": "Services de jardinage et d'aménagement paysager",
            "ar": "خدمات البستنة وتنسيق الحدائق",
            "de": "Schöne Gärten und Landschaftsgestaltungsdienste",
        },
    ),
    Category(
        id=4,
        parent_id=None,
        names={"en": "Pet Care", "fr": "Soins pour animaux", "ar": "رعاية الحيوانات الأليفة", "de": "Tierpflege"},
        descriptions={
            "en": "Loving care for your beloved pets",
            "fr": "Soins attentionnés pour vos animaux de compagnie",
            "ar": "رعاية محبة لحيواناتك الأليفة",
            "de": "Liebevolle Pflege für Ihre geliebten Haustiere",
        },
    ),
    Category(
        id=5,
        parent_id=None,
        names={"en": "Tutoring", "fr": "Cours particuliers", "ar": "الدروس الخصوصية", "de": "Nachhilfe"},
        descriptions={
            "en": "Expert educational support and tutoring",
            "fr": "Soutien éducatif et cours particuliers d'experts",
            "ar": "دعم تعليمي ودروس خصوصية من خبراء",
            "de": "Experte Bildungsunterstützung und Nachhilfe",
        },
    ),
    Category(
        id=6,
        parent_id=None,
        names={"en": "Moving & Packing", "fr": "Déménagement", "ar": "النقل والتعبئة", "de": "Umzug & Verpackung"},
        descriptions={
            "en": "Reliable moving and relocation services",
            "fr": "Services de déménagement et de relocalisation fiables",
            "ar": "خدمات نقل وانتقال موثوقة",
            "de": "Zuverlässige Umzugs- und Umsiedlungsdienste",
        },
    ),
    Category(
        id=7,
        parent_id=None,
        names={"en": "Car Services", "fr": "Services automobiles", "ar": "خدمات السيارات", "de": "Autodienste"},
        descriptions={
            "en": "Professional automotive services",
            "fr": "Services automobiles professionnels",
            "ar": "خدمات سيارات مهنية",
            "de": "Professionelle Automobildienste",
        },
    ),
    Category(
        id=8,
        parent_id=None,
        names={"en": "Event Planning", "fr": "Organisation d'événements", "ar": "تخطيط الفعاليات", "de": "Eventplanung"},
        descriptions={
            "en": "Make your events unforgettable",
            "fr": "Rendez vos événements inoubliables",
            "ar": "اجعل فعالياتك لا تُنسى",
            "de": "Machen Sie Ihre Veranstaltungen unvergesslich",
        },
    ),
    Category(
        id=101,
        parent_id=1,
        names={"en": "House Cleaning", "fr": "Nettoyage de maison", "ar": "تنظيف المنزل", "de": "Hausreinigung"},
        descriptions={
            "en": "Complete home cleaning service",
            "fr": "Service de nettoyage complet à domicile",
            "ar": "خدمة تنظيف منزلية شاملة",
            "de": "Kompletter Hausreinigungsdienst",
        },
    ),
    Category(
        id=102,
        parent_id=1,
        names={"en": "Office Cleaning", "fr": "Nettoyage de bureau", "ar": "تنظيف المكتب", "de": "Büroreinigung"},
        descriptions={
            "en": "Professional office maintenance",
            "fr": "Entretien professionnel de bureau",
            "ar": "صيانة مكتبية مهنية",
            "de": "Professionelle Bürowartung",
        },
    ),
    Category(
        id=103,
        parent_id=1,
        names={"en": "Deep Cleaning", "fr": "Grand ménage", "ar": "تنظيف عميق", "de": "Grundreinigung"},
        descriptions={
            "en": "Thorough deep cleaning service",
            "fr": "Service de grand ménage approfondi",
            "ar": "خدمة تنظيف عميق شامل",
            "de": "Gründlicher Tiefenreinigungsdienst",
        },
    ),
    Category(
        id=104,
        parent_id=1,
        names={"en": "Window Cleaning", "fr": "Nettoyage de vitres", "ar": "تنظيف النوافذ", "de": "Fensterreinigung"},
        descriptions={
            "en": "Crystal clear window cleaning",
            "fr": "Nettoyage de vitres cristallin",
            "ar": "تنظيف نوافذ صافٍ كالبلور",
            "de": "Kristallklare Fensterreinigung",
        },
    ),
    Category(
        id=105,
        parent_id=1,
        names={"en": "Carpet Cleaning", "fr": "Nettoyage de tapis", "ar": "تنظيف السجاد", "de": "Teppichreinigung"},
        descriptions={
            "en": "Professional carpet care",
            "fr": "Entretien professionnel de tapis",
            "ar": "رعاية مهنية للسجاد",
            "de": "Professionelle Teppichpflege",
        },
    ),
    Category(
        id=106,
        parent_id=1,
        names={"en": "Post-Construction", "fr": "Nettoyage post-travaux", "ar": "تنظيف ما بعد البناء", "de": "Nachbauarbeiten"},
        descriptions={
            "en": "Clean up after renovations",
            "fr": "Nettoyage après rénovations",
            "ar": "تنظيف بعد التجديدات",
            "de": "Aufräumen nach Renovierungen",
        },
    ),
    Category(
        id=201,
        parent_id=2,
        names={"en": "Furniture Assembly", "fr": "Montage de meubles", "ar": "تجميع الأثاث", "de": "Möbelmontage"},
        descriptions={
            "en": "Professional furniture setup",
            "fr": "Installation professionnelle de meubles",
            "ar": "تركيب أثاث مهني",
            "de": "Professionelle Möbelmontage",
        },
    ),
    Category(
        id=202,
        parent_id=2,
        names={"en": "Painting", "fr": "Peinture", "ar": "الطلاء", "de": "Malen"},
        descriptions={
            "en": "Interior and exterior painting",
            "fr": "Peinture intérieure et extérieure",
            "ar": "طلاء داخلي وخارجي",
            "de": "Innen- und Außenanstrich",
        },
    ),
    Category(
        id=203,
        parent_id=2,
        names={"en": "Wall Mounting", "fr": "Fixation murale", "ar": "التثبيت على الحائط", "de": "Wandmontage"},
        descriptions={
            "en": "Secure mounting services",
            "fr": "Services de fixation sécurisée",
            "ar": "خدمات تثبيت آمنة",
            "de": "Sichere Montagedienste",
        },
    ),
    Category(
        id=204,
        parent_id=2,
        names={"en": "Door & Window Repair", "fr": "Réparation portes et fenêtres", "ar": "إصلاح الأبواب والنوافذ", "de": "Tür- und Fensterreparatur"},
        descriptions={
            "en": "Fix and maintain doors/windows",
            "fr": "Réparer et entretenir portes/fenêtres",
            "ar": "إصلاح وصيانة الأبواب والنوافذ",
            "de": "Türen und Fenster reparieren und warten",
        },
    ),
    Category(
        id=205,
        parent_id=2,
        names={"en": "Shelving Installation", "fr": "Installation d'étagères", "ar": "تركيب الرفوف", "de": "Regalinstallation"},
        descriptions={
            "en": "Custom shelf installation",
            "fr": "Installation d'étagères sur mesure",
            "ar": "تركيب رفوف مخصصة",
            "de": "Maßgeschneiderte Regalinstallation",
        },
    ),
    Category(
        id=206,
        parent_id=2,
        names={"en": "Minor Repairs", "fr": "Petites réparations", "ar": "إصلاحات صغيرة", "de": "Kleinreparaturen"},
        descriptions={
            "en": "Quick fix solutions",
            "fr": "Solutions de réparation rapide",
            "ar": "حلول إصلاح سريعة",
            "de": "Schnelle Reparaturlösungen",
        },
    ),
    Category(
        id=301,
        parent_id=3,
        names={"en": "Lawn Mowing", "fr": "Tonte de pelouse", "ar": "قص العشب", "de": "Rasenmähen"},
        descriptions={
            "en": "Regular lawn maintenance",
            "fr": "Entretien régulier de pelouse",
            "ar": "صيانة منتظمة للعشب",
            "de": "Regelmäßige Rasenpflege",
        },
    ),
    Category(
        id=302,
        parent_id=3,
        names={"en": "Garden Maintenance", "fr": "Entretien de jardin", "ar": "صيانة الحديقة", "de": "Gartenpflege"},
        descriptions={
            "en": "Complete garden care",
            "fr": "Soins complets de jardin",
            "ar": "رعاية شاملة للحديقة",
            "de": "Komplette Gartenpflege",
        },
    ),
    Category(
        id=303,
        parent_id=3,
        names={"en": "Tree Trimming", "fr": "Taille d'arbres", "ar": "تقليم الأشجار", "de": "Baumschnitt"},
        descriptions={
            "en": "Professional tree care",
            "fr": "Soins professionnels d'arbres",
            "ar": "رعاية مهنية للأشجار",
            "de": "Professionelle Baumpflege",
        },
    ),
    Category(
        id=304,
        parent_id=3,
        names={"en": "Planting", "fr": "Plantation", "ar": "الزراعة", "de": "Bepflanzung"},
        descriptions={
            "en": "New plant installation",
            "fr": "Installation de nouvelles plantes",
            "ar": "تركيب نباتات جديدة",
            "de": "Neue Pflanzeninstallation",
        },
    ),
    Category(
        id=305,
        parent_id=3,
        names={"en": "Weeding", "fr": "Désherbage", "ar": "إزالة الأعشاب", "de": "Unkrautentfernung"},
        descriptions={
            "en": "Garden weed control",
            "fr": "Contrôle des mauvaises herbes",
            "ar": "مكافحة الأعشاب الضارة",
            "de": "Gartenunkrautbekämpfung",
        },
    ),
    Category(
        id=306,
        parent_id=3,
        names={"en": "Irrigation Setup", "fr": "Installation d'irrigation", "ar": "تركيب الري", "de": "Bewässerungsanlage"},
        descriptions={
            "en": "Automatic watering systems",
            "fr": "Systèmes d'arrosage automatique",
            "ar": "أنظمة ري تلقائية",
            "de": "Automatische Bewässerungssysteme",
        },
    ),
    Category(
        id=401,
        parent_id=4,
        names={"en": "Pet Walking", "fr": "Promenade d'animaux", "ar": "مشي الحيوانات", "de": "Gassigehen"},
        descriptions={
            "en": "Regular pet exercise",
            "fr": "Exercice régulier pour animaux",
            "ar": "تمرين منتظم للحيوانات",
            "de": "Regelmäßige Tierbewegung",
        },
    ),
    Category(
        id=402,
        parent_id=4,
        names={"en": "Pet Sitting", "fr": "Garde d'animaux", "ar": "رعاية الحيوانات", "de": "Tierbetreuung"},
        descriptions={
            "en": "Pet care while you're away",
            "fr": "Garde d'animaux en votre absence",
            "ar": "رعاية الحيوانات أثناء غيابك",
            "de": "Tierbetreuung während Ihrer Abwesenheit",
        },
    ),
    Category(
        id=403,
        parent_id=4,
        names={"en": "Pet Grooming", "fr": "Toilettage d'animaux", "ar": "تجميل الحيوانات", "de": "Tierpflege"},
        descriptions={
            "en": "Professional pet grooming",
            "fr": "Toilettage professionnel d'animaux",
            "ar": "تجميل مهني للحيوانات",
            "de": "Professionelle Tierpflege",
        },
    ),
    Category(
        id=404,
        parent_id=4,
        names={"en": "Pet Training", "fr": "Dressage d'animaux", "ar": "تدريب الحيوانات", "de": "Tierausbildung"},
        descriptions={
            "en": "Behavioral training",
            "fr": "Dressage comportemental",
            "ar": "تدريب سلوكي",
            "de": "Verhaltenstraining",
        },
    ),
    Category(
        id=501,
        parent_id=5,
        names={"en": "Math Tutoring", "fr": "Cours de mathématiques", "ar": "دروس الرياضيات", "de": "Mathematik-Nachhilfe"},
        descriptions={
            "en": "Mathematics support",
            "fr": "Soutien en mathématiques",
            "ar": "دعم في الرياضيات",
            "de": "Mathematikunterstützung",
        },
    ),
    Category(
        id=502,
        parent_id=5,
        names={"en": "Language Tutoring", "fr": "Cours de langues", "ar": "دروس اللغات", "de": "Sprachunterricht"},
        descriptions={
            "en": "Language learning support",
            "fr": "Soutien à l'apprentissage des langues",
            "ar": "دعم تعلم اللغات",
            "de": "Sprachlernunterstützung",
        },
    ),
    Category(
        id=503,
        parent_id=5,
        names={"en": "Science Tutoring", "fr": "Cours de sciences", "ar": "دروس العلوم", "de": "Naturwissenschaften-Nachhilfe"},
        descriptions={
            "en": "Science subject help",
            "fr": "Aide en matières scientifiques",
            "ar": "مساعدة في المواد العلمية",
            "de": "Hilfe in naturwissenschaftlichen Fächern",
        },
    ),
    Category(
        id=504,
        parent_id=5,
        names={"en": "Computer Skills", "fr": "Compétences informatiques", "ar": "مهارات الحاسوب", "de": "Computerkenntnisse"},
        descriptions={
            "en": "Digital literacy training",
            "fr": "Formation à la culture numérique",
            "ar": "تدريب على الثقافة الرقمية",
            "de": "Digitale Kompetenzschulung",
        },
    ),
    Category(
        id=505,
        parent_id=5,
        names={"en": "Music Lessons", "fr": "Cours de musique", "ar": "دروس الموسيقى", "de": "Musikunterricht"},
        descriptions={
            "en": "Musical instrument lessons",
            "fr": "Cours d'instruments de musique",
            "ar": "دروس الآلات الموسيقية",
            "de": "Musikinstrumentenunterricht",
        },
    ),
    Category(
        id=601,
        parent_id=6,
        names={"en": "Home Moving", "fr": "Déménagement domicile", "ar": "نقل المنزل", "de": "Wohnungsumzug"},
        descriptions={
            "en": "Complete home relocation",
            "fr": "Relocalisation complète de domicile",
            "ar": "انتقال منزلي كامل",
            "de": "Komplette Wohnungsumsiedlung",
        },
    ),
    Category(
        id=602,
        parent_id=6,
        names={"en": "Office Moving", "fr": "Déménagement bureau", "ar": "نقل المكتب", "de": "Büroumzug"},
        descriptions={
            "en": "Business relocation services",
            "fr": "Services de relocalisation d'entreprise",
            "ar": "خدمات نقل الأعمال",
            "de": "Geschäftsumsiedlungsdienste",
        },
    ),
    Category(
        id=603,
        parent_id=6,
        names={"en": "Packing Services", "fr": "Services d'emballage", "ar": "خدمات التعبئة", "de": "Verpackungsdienste"},
        descriptions={
            "en": "Professional packing help",
            "fr": "Aide professionnelle à l'emballage",
            "ar": "مساعدة مهنية في التعبئة",
            "de": "Professionelle Verpackungshilfe",
        },
    ),
    Category(
        id=604,
        parent_id=6,
        names={"en": "Furniture Moving", "fr": "Transport de meubles", "ar": "نقل الأثاث", "de": "Möbeltransport"},
        descriptions={
            "en": "Furniture transport service",
            "fr": "Service de transport de meubles",
            "ar": "خدمة نقل الأثاث",
            "de": "Möbeltransportdienst",
        },
    ),
    Category(
        id=605,
        parent_id=6,
        names={"en": "Storage Services", "fr": "Services de stockage", "ar": "خدمات التخزين", "de": "Lagerdienste"},
        descriptions={
            "en": "Secure storage solutions",
            "fr": "Solutions de stockage sécurisées",
            "ar": "حلول تخزين آمنة",
            "de": "Sichere Lagerlösungen",
        },
    ),
    Category(
        id=701,
        parent_id=7,
        names={"en": "Car Washing", "fr": "Lavage de voiture", "ar": "غسيل السيارات", "de": "Autowäsche"},
        descriptions={
            "en": "Professional car cleaning",
            "fr": "Nettoyage professionnel de voiture",
            "ar": "تنظيف سيارات مهني",
            "de": "Professionelle Autoreinigung",
        },
    ),
    Category(
        id=702,
        parent_id=7,
        names={"en": "Oil Change", "fr": "Changement d'huile", "ar": "تغيير الزيت", "de": "Ölwechsel"},
        descriptions={
            "en": "Engine oil replacement",
            "fr": "Remplacement d'huile moteur",
            "ar": "استبدال زيت المحرك",
            "de": "Motorölwechsel",
        },
    ),
    Category(
        id=703,
        parent_id=7,
        names={"en": "Tire Change", "fr": "Changement de pneus", "ar": "تغيير الإطارات", "de": "Reifenwechsel"},
        descriptions={
            "en": "Tire replacement service",
            "fr": "Service de remplacement de pneus",
            "ar": "خدمة استبدال الإطارات",
            "de": "Reifenwechseldienst",
        },
    ),
    Category(
        id=704,
        parent_id=7,
        names={"en": "Battery Replacement", "fr": "Remplacement de batterie", "ar": "استبدال البطارية", "de": "Batteriewechsel"},
        descriptions={
            "en": "Car battery service",
            "fr": "Service de batterie automobile",
            "ar": "خدمة بطارية السيارة",
            "de": "Autobatteriedienst",
        },
    ),
    Category(
        id=705,
        parent_id=7,
        names={"en": "Car Detailing", "fr": "Détailage automobile", "ar": "تفصيل السيارات", "de": "Autodetailierung"},
        descriptions={
            "en": "Comprehensive car care",
            "fr": "Soins complets de voiture",
            "ar": "رعاية شاملة للسيارات",
            "de": "Umfassende Autopflege",
        },
    ),
    Category(
        id=801,
        parent_id=8,
        names={"en": "Event Planning", "fr": "Planification d'événements", "ar": "تخطيط الفعاليات", "de": "Eventplanung"},
        descriptions={
            "en": "Complete event coordination",
            "fr": "Coordination complète d'événements",
            "ar": "تنسيق فعاليات كامل",
            "de": "Komplette Veranstaltungskoordination",
        },
    ),
    Category(
        id=802,
        parent_id=8,
        names={"en": "Catering Services", "fr": "Services de restauration", "ar": "خدمات التموين", "de": "Catering-Dienste"},
        descriptions={
            "en": "Professional catering",
            "fr": "Restauration professionnelle",
            "ar": "تموين مهني",
            "de": "Professionelles Catering",
        },
    ),
    Category(
        id=803,
        parent_id=8,
        names={"en": "Photography", "fr": "Photographie", "ar": "التصوير", "de": "Fotografie"},
        descriptions={
            "en": "Event photography services",
            "fr": "Services de photographie d'événements",
            "ar": "خدمات تصوير الفعاليات",
            "de": "Veranstaltungsfotografiedienste",
        },
    ),
    Category(
        id=804,
        parent_id=8,
        names={"en": "DJ Services", "fr": "Services DJ", "ar": "خدمات الدي جي", "de": "DJ-Dienste"},
        descriptions={
            "en": "Professional DJ entertainment",
            "fr": "Divertissement DJ professionnel",
            "ar": "ترفيه دي جي مهني",
            "de": "Professionelle DJ-Unterhaltung",
        },
    ),
    Category(
        id=805,
        parent_id=8,
        names={"en": "Decoration", "fr": "Décoration", "ar": "الديكور", "de": "Dekoration"},
        descriptions={
            "en": "Event decoration services",
            "fr": "Services de décoration d'événements",
            "ar": "خدمات ديكور الفعاليات",
            "de": "Veranstaltungsdekoration",
        },
    ),
]

_BY_ID: Dict[int, Category] = {c.id: c for c in CATEGORIES}


def get_all_categories() -> List[Category]:
    return list(CATEGORIES)


def get_parent_categories() -> List[Category]:
    return [c for c in CATEGORIES if c.is_parent]


def get_subcategories(parent_id: int) -> List[Category]:
    return [c for c in CATEGORIES if c.parent_id == parent_id]


def get_category(category_id: int) -> Optional[Category]:
    return _BY_ID.get(category_id)


def is_valid_category(category_id: int) -> bool:
    return category_id in _BY_ID


def is_subcategory(category_id: int) -> bool:
    category = _BY_ID.get(category_id)
    return category is not None and not category.is_parent


def expand_category_ids(category_id: int) -> List[int]:
    """A parent id matches itself and all of its children."""
    category = _BY_ID.get(category_id)
    if category is None:
        return []
    if category.is_parent:
        return [category.id] + [c.id for c in get_subcategories(category.id)]
    return [category.id]
