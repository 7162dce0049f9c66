from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime, date

# Constantes partagées par les écrans
ORDER_STATUSES = ["En cours", "Terminé", "Livré", "Annulé"]

TISSU_OPTIONS = [
    "bazin", "wax", "coton", "soie", "lin", "polyester", "jean", "laine", "autre",
]

COULEUR_OPTIONS = [
    "blanc", "noir", "bleu", "rouge", "vert", "jaune", "orange",
    "violet", "rose", "gris", "marron", "beige", "multicolore",
]

TRANSACTION_TYPES = ["ENTREE", "SORTIE"]

MODES_PAIEMENT = {
    "ESPECES": "Espèces",
    "CARTE": "Carte",
    "VIREMENT": "Virement",
    "CHEQUE": "Chèque",
}

CATEGORIES_SUGGESTIONS = [
    "Vente", "Achat matières premières", "Frais généraux", "Transport",
    "Électricité", "Eau", "Téléphone/Internet", "Assurance", "Maintenance",
    "Publicité", "Formation", "Autres",
]

USER_ROLES = {
    "Admin": "Administrateur",
    "User": "Utilisateur",
}

COUNTRIES = [
    "France", "Belgique", "Suisse", "Canada", "Maroc", "Tunisie", "Algérie",
    "Sénégal", "Côte d'Ivoire", "Cameroun", "Ghana", "RDC", "Nigeria",
    "Mali", "Burkina Faso", "Niger", "Tchad",
]

MEASURE_FIELDS = [
    ("tourPoitrine", "Tour de poitrine"),
    ("tourCeinture", "Tour ceinture"),
    ("longueurManche", "Longueur de manche"),
    ("tourBras", "Tour de bras"),
    ("longueurChemise", "Longueur de chemise"),
    ("longueurPantalon", "Longueur de pantalon"),
    ("largeurEpaules", "Largeur d'épaules"),
    ("tourCou", "Tour de cou"),
    ("tourMachette", "Tour de machette"),
    ("basDuPied", "Bas du pied"),
    ("cuisse", "Cuisse"),
]

# Schémas pour les clients et leurs mesures
class Measure(BaseModel):
    id: Optional[int] = None
    customerId: Optional[int] = None
    tourPoitrine: Optional[float] = None
    tourCeinture: Optional[float] = None
    longueurManche: Optional[float] = None
    tourBras: Optional[float] = None
    longueurChemise: Optional[float] = None
    longueurPantalon: Optional[float] = None
    largeurEpaules: Optional[float] = None
    tourCou: Optional[float] = None
    tourMachette: Optional[float] = None
    basDuPied: Optional[float] = None
    cuisse: Optional[float] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

class CustomerSummary(BaseModel):
    id: int
    name: str
    phoneNumber: str = ""
    photoUrl: Optional[str] = None
    createdAt: Optional[datetime] = None
    hasMeasures: bool = False

class Customer(BaseModel):
    id: int
    name: str
    phoneNumber: str = ""
    photoUrl: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
    measure: Optional[Measure] = None

# Schémas pour le catalogue
class Modele(BaseModel):
    id: int
    price: float
    imageUrl: Optional[str] = None
    # Le backend ne déclare pas de nom; il est lu s'il est présent
    nom: Optional[str] = None
    description: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @property
    def label(self) -> str:
        return self.nom or f"Modèle #{self.id}"

# Schémas pour les commandes
class OrderItem(BaseModel):
    id: Optional[int] = None
    modeleId: int
    typeTissu: str = ""
    couleur: str = ""
    quantite: int = 1
    prixUnitaire: float = 0
    notes: Optional[str] = None

class OrderSummary(BaseModel):
    id: int
    customerId: int
    customerName: str = ""
    dateCommande: datetime
    dateRendezVous: Optional[datetime] = None
    total: float = 0
    reduction: Optional[float] = None
    totalFinal: float = 0
    statut: str
    nombreItems: int = 0
    createdAt: Optional[datetime] = None

class Order(OrderSummary):
    notes: Optional[str] = None
    orderItems: List[OrderItem] = []
    updatedAt: Optional[datetime] = None

# Schémas pour la caisse
class Transaction(BaseModel):
    id: int
    montant: float
    type: str
    description: str = ""
    categorie: Optional[str] = None
    modePaiement: Optional[str] = None
    dateTransaction: datetime
    notes: Optional[str] = None
    userId: Optional[int] = None
    montantAvecSigne: float = 0
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

class StatistiquesCaisse(BaseModel):
    totalEntrees: float = 0
    totalSorties: float = 0
    solde: float = 0
    nombreTransactions: int = 0
    moyenneTransactions: float = 0
    periodeDebut: Optional[datetime] = None
    periodeFin: Optional[datetime] = None

class TotauxSemaine(BaseModel):
    nombreTransactions: int = 0
    nombreEntrees: int = 0
    nombreSorties: int = 0
    totalEntrees: float = 0
    totalSorties: float = 0
    soldeNet: float = 0

class SemaineTransactions(BaseModel):
    annee: int
    numeroSemaine: int
    debutSemaine: date
    finSemaine: date
    transactions: List[Transaction] = []
    totaux: TotauxSemaine = TotauxSemaine()

    @property
    def key(self) -> str:
        return f"{self.annee}-{self.numeroSemaine}"

class TotauxGeneraux(BaseModel):
    periodeDebut: Optional[date] = None
    periodeFin: Optional[date] = None
    nombreSemaines: int = 0
    nombreTransactionsTotal: int = 0
    totalEntreesGenerales: float = 0
    totalSortiesGenerales: float = 0
    soldeNetGeneral: float = 0

class TransactionsParSemaine(BaseModel):
    semaines: List[SemaineTransactions] = []
    totauxGeneraux: TotauxGeneraux = TotauxGeneraux()

# Compte utilisateur: même forme pour la session et pour l'administration
class User(BaseModel):
    id: int
    name: str = ""
    userName: str = ""
    email: str = ""
    phone: Optional[str] = None
    role: str = "User"
    country: Optional[str] = None
    city: Optional[str] = None
    status: bool = True
    picture: Optional[str] = None
    createdAt: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "Admin"

    @property
    def role_label(self) -> str:
        return USER_ROLES.get(self.role, self.role)

    @property
    def display_name(self) -> str:
        return self.name or self.userName

class UserListResponse(BaseModel):
    users: List[User] = []
    totalCount: int = 0

# Formulaire de commande tel que saisi (valeurs encore non validées)
class OrderItemForm(BaseModel):
    id: Optional[int] = None
    modeleId: Optional[int] = None
    typeTissu: str = ""
    couleur: str = ""
    quantite: Optional[int] = 1
    prixUnitaire: Optional[float] = None
    notes: str = ""

class OrderForm(BaseModel):
    customerId: Optional[int] = None
    dateCommande: str = ""
    dateRendezVous: str = ""
    statut: str = "En cours"
    notes: str = ""
    hasReduction: bool = False
    reduction: Optional[float] = None
    reductionInvalide: bool = False
    orderItems: List[OrderItemForm] = []
