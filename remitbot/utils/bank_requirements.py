#!/usr/bin/env python3
"""
Bank-Field Requirement Catalog
Required recipient bank fields per settlement currency, based on Wise API requirements.

Field order is significant. The extractor tries fields in the order they are
declared here, and within a field it tries the canonical name, then the label,
then each alias in order. Declare more specific identifiers before generic ones
("Account type" before "Type", "Account number" before "Account").
"""

from typing import Dict, List, Mapping, Optional, Tuple
from pydantic import BaseModel, ConfigDict
from remitbot.utils.logger import get_logger

logger = get_logger("bank_requirements")


class BankFieldRequirement(BaseModel):
    """A single bank field the payments provider needs to create a recipient."""

    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    description: str
    example: str
    aliases: Tuple[str, ...] = ()
    # Regex with one capture group, tried on the raw text when no labeled value is found
    bare_pattern: Optional[str] = None

    @property
    def identifiers(self) -> List[str]:
        """Candidate identifiers in precedence order: name, label, aliases."""
        return [self.name, self.label, *self.aliases]


class CountryBankRequirements(BaseModel):
    """Ordered field list for one currency."""

    model_config = ConfigDict(frozen=True)

    country: str
    currency: str
    account_type: str
    fields: Tuple[BankFieldRequirement, ...]
    instructions: str

    @property
    def field_names(self) -> List[str]:
        return [field.name for field in self.fields]


COUNTRY_BANK_REQUIREMENTS: Dict[str, CountryBankRequirements] = {
    "MXN": CountryBankRequirements(
        country="Mexico",
        currency="MXN",
        account_type="mexican",
        fields=(
            BankFieldRequirement(
                name="clabe",
                label="CLABE Number",
                description="Mexican standardized 18-digit bank account number",
                example="032180000118359719",
                aliases=("CLABE",),
                bare_pattern=r"(?<!\d)(\d{18})(?!\d)",
            ),
        ),
        instructions=(
            "For Mexico, we need the recipient's CLABE number (18 digits). This is the "
            "standardized Mexican bank account number. The recipient can find it on their "
            "bank statement or by calling their bank."
        ),
    ),
    "BRL": CountryBankRequirements(
        country="Brazil",
        currency="BRL",
        account_type="brazilian",
        fields=(
            BankFieldRequirement(
                name="cpf",
                label="CPF",
                description="Brazilian tax ID (11 digits)",
                example="12345678901",
                aliases=("Tax ID", "Cadastro de Pessoas Físicas", "Documento"),
            ),
            BankFieldRequirement(
                name="accountNumber",
                label="Account Number",
                description="Bank account number",
                example="12345678",
                aliases=("Número da conta", "Numero da conta", "Account", "Conta"),
            ),
            BankFieldRequirement(
                name="accountType",
                label="Account Type",
                description="checking or savings",
                example="checking",
                aliases=("Tipo de conta", "Type", "Tipo"),
            ),
            BankFieldRequirement(
                name="bankCode",
                label="Bank Code",
                description="3-digit bank code",
                example="001",
                aliases=("Código do banco", "Codigo do banco", "Code", "Banco"),
            ),
        ),
        instructions=(
            "For Brazil, we need the recipient's CPF (tax ID), bank account number, "
            "account type (checking or savings), and the 3-digit bank code."
        ),
    ),
    "GBP": CountryBankRequirements(
        country="United Kingdom",
        currency="GBP",
        account_type="sort_code",
        fields=(
            BankFieldRequirement(
                name="sortCode",
                label="Sort Code",
                description="6-digit UK bank sort code",
                example="231470",
            ),
            BankFieldRequirement(
                name="accountNumber",
                label="Account Number",
                description="8-digit UK account number",
                example="31926819",
                aliases=("Account",),
            ),
        ),
        instructions=(
            "For UK transfers, we need the recipient's 6-digit sort code and 8-digit "
            "account number. These can be found on their bank statement or card."
        ),
    ),
    "EUR": CountryBankRequirements(
        country="Europe",
        currency="EUR",
        account_type="iban",
        fields=(
            BankFieldRequirement(
                name="iban",
                label="IBAN",
                description="International Bank Account Number",
                example="DE89370400440532013000",
            ),
        ),
        instructions=(
            "For European transfers, we need the recipient's IBAN (International Bank "
            "Account Number). This can be found on their bank statement."
        ),
    ),
    "ARS": CountryBankRequirements(
        country="Argentina",
        currency="ARS",
        account_type="argentina",
        fields=(
            BankFieldRequirement(
                name="accountNumber",
                label="CBU/CVU Number",
                description="Argentine bank account number (22 digits)",
                example="0170099520000006542386",
                aliases=("CBU", "CVU", "Account number", "Número de cuenta", "Numero de cuenta"),
            ),
            BankFieldRequirement(
                name="accountType",
                label="Account Type",
                description="CHECKING (cuenta corriente) or SAVINGS (caja de ahorro)",
                example="SAVINGS",
                aliases=("Tipo de cuenta", "Type", "Tipo"),
            ),
            BankFieldRequirement(
                name="phoneNumber",
                label="Phone Number",
                description="Argentine phone number (10-20 digits)",
                example="1145678901",
                aliases=("Phone", "Teléfono", "Telefono"),
            ),
            BankFieldRequirement(
                name="idDocumentNumber",
                label="DNI/CUIT/CUIL",
                description="Argentine national ID (DNI), CUIT, or CUIL",
                example="12345678",
                aliases=("DNI", "CUIT", "CUIL", "Documento", "Identification", "ID"),
            ),
            BankFieldRequirement(
                name="city",
                label="City",
                description="City where recipient lives",
                example="Buenos Aires",
                aliases=("Ciudad",),
            ),
        ),
        instructions=(
            "For Argentina, we need the recipient's CBU or CVU (22-digit bank account "
            "number), account type (CHECKING or SAVINGS), phone number, DNI/CUIT/CUIL, and city."
        ),
    ),
    "CLP": CountryBankRequirements(
        country="Chile",
        currency="CLP",
        account_type="chile",
        fields=(
            BankFieldRequirement(
                name="accountNumber",
                label="Account Number",
                description="Chilean bank account number",
                example="1234567890",
                aliases=("Número de cuenta", "Numero de cuenta", "Account", "Cuenta"),
            ),
            BankFieldRequirement(
                name="accountType",
                label="Account Type",
                description="CHECKING (cuenta corriente) or SAVINGS (cuenta de ahorro)",
                example="CHECKING",
                aliases=("Tipo de cuenta", "Type", "Tipo"),
            ),
            BankFieldRequirement(
                name="bankCode",
                label="Bank Code",
                description="Chilean bank code (e.g., BCHICLRM for Banco de Chile)",
                example="BCHICLRM",
                aliases=("Código del banco", "Codigo del banco", "SWIFT", "BIC", "Banco"),
            ),
            BankFieldRequirement(
                name="idDocumentNumber",
                label="RUT",
                description="Chilean RUT (Rol Único Tributario)",
                example="12345678-9",
                aliases=("Rol Unico Tributario", "Documento", "ID"),
            ),
        ),
        instructions=(
            "For Chile, we need the recipient's bank account number, account type "
            "(CHECKING or SAVINGS), bank code (SWIFT/BIC), and RUT (Chilean ID)."
        ),
    ),
    "COP": CountryBankRequirements(
        country="Colombia",
        currency="COP",
        account_type="colombia",
        fields=(
            BankFieldRequirement(
                name="accountNumber",
                label="Account Number",
                description="Bank account number (4-20 characters)",
                example="00012345678",
                aliases=("Bank account number", "Account number", "Account"),
            ),
            BankFieldRequirement(
                name="accountType",
                label="Account Type",
                description="CURRENT (checking) or SAVINGS",
                example="SAVINGS",
                aliases=("Account type", "Tipo de cuenta", "Type"),
            ),
            BankFieldRequirement(
                name="phoneNumber",
                label="Phone Number",
                description="Colombian phone number (7-20 digits)",
                example="3001234567",
                aliases=("Phone", "Phone number", "Teléfono", "Telefono"),
            ),
            BankFieldRequirement(
                name="idDocumentNumber",
                label="Cédula Number",
                description="Colombian national ID number (Cédula de Ciudadanía)",
                example="1234567890",
                aliases=("Cédula", "Cedula", "Cédula number", "Cedula number", "ID", "CC"),
            ),
            BankFieldRequirement(
                name="city",
                label="City",
                description="City where recipient lives",
                example="Bogotá",
                aliases=("Ciudad",),
            ),
            BankFieldRequirement(
                name="address",
                label="Street Address",
                description="Recipient's street address",
                example="Calle 123 #45-67",
                aliases=("Address", "Street address", "Dirección", "Direccion"),
            ),
            BankFieldRequirement(
                name="postCode",
                label="Post Code",
                description="Postal code",
                example="110111",
                aliases=(
                    "Post code", "Postcode", "Postal code", "Zip code", "Zip",
                    "Código postal", "Codigo postal",
                ),
            ),
        ),
        instructions=(
            "For Colombia, we need the recipient's bank account number, account type "
            "(CURRENT for checking or SAVINGS), phone number, Cédula number (Colombian "
            "national ID), and complete address (city, street address, and postal code)."
        ),
    ),
}


def get_requirements(currency: str) -> Optional[CountryBankRequirements]:
    """Get bank requirements for a currency, or None if unsupported."""
    if not currency:
        return None
    return COUNTRY_BANK_REQUIREMENTS.get(currency.upper())


def missing_fields(currency: str, details: Mapping[str, str]) -> List[str]:
    """
    Labels of required fields that have no value yet, in catalog order.

    An empty list means the detail set is complete.
    """
    requirements = get_requirements(currency)
    if requirements is None:
        raise ValueError(f"Unsupported currency: {currency}")

    return [
        field.label
        for field in requirements.fields
        if not (details.get(field.name) or "").strip()
    ]


def format_bank_details(currency: str, details: Mapping[str, str]) -> str:
    """Format collected details as 'Label: value' lines in catalog order."""
    requirements = get_requirements(currency)
    if requirements is None:
        return ""

    return "\n".join(
        f"{field.label}: {details[field.name]}"
        for field in requirements.fields
        if details.get(field.name)
    )
