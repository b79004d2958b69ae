# api/settlement.py

# Smallest amount worth settling; anything at or below is rounding noise
EPSILON = 0.01


class Participant:
    def __init__(self, id, name="", payment_address=None, paid=False):
        self.id = id
        self.name = name
        self.payment_address = payment_address
        self.paid = bool(paid)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "paid": self.paid,
            "paymentAddress": self.payment_address,
        }

    def __repr__(self):
        return f"Participant({self.id!r}, {self.name!r})"


class ExpenseEntry:
    def __init__(self, id, amount, paid_by, beneficiaries=(), description=""):
        self.id = id
        self.amount = float(amount)
        self.paid_by = paid_by
        # Set semantics, first-seen order kept
        self.beneficiaries = tuple(dict.fromkeys(beneficiaries))
        self.description = description

    def to_dict(self):
        return {
            "id": self.id,
            "description": self.description,
            "amount": self.amount,
            "paidBy": self.paid_by,
            "beneficiaries": list(self.beneficiaries),
        }

    def __repr__(self):
        return f"ExpenseEntry({self.id!r}, {self.amount!r}, paid_by={self.paid_by!r})"


class Transfer:
    def __init__(self, debtor, creditor, amount):
        self.debtor = debtor
        self.creditor = creditor
        self.amount = amount

    def to_dict(self):
        return {"from": self.debtor, "to": self.creditor, "amount": self.amount}

    def __eq__(self, other):
        if not isinstance(other, Transfer):
            return NotImplemented
        return (self.debtor, self.creditor, self.amount) == (other.debtor, other.creditor, other.amount)

    def __repr__(self):
        return f"Transfer({self.debtor!r} -> {self.creditor!r}, {self.amount!r})"


def _paid_and_owed(participant_id, expenses):
    paid = 0.0
    owed = 0.0

    for exp in expenses:
        if exp.paid_by == participant_id:
            paid += exp.amount

        # An entry with no beneficiaries adds nothing to anyone's share
        if participant_id in exp.beneficiaries:
            owed += exp.amount / len(exp.beneficiaries)

    return paid, owed


def compute_share(participant_id, expenses):
    """What the participant still has to put in: owed minus paid."""
    paid, owed = _paid_and_owed(participant_id, expenses)
    return owed - paid


def compute_balances(participants, expenses):
    """
    Net balance per participant id, in participant order.

    Positive means the participant is owed money, negative means they owe.
    Every payer and beneficiary is expected to be in `participants`.
    """
    balances = {}
    for person in participants:
        paid, owed = _paid_and_owed(person.id, expenses)
        balances[person.id] = paid - owed
    return balances


def compute_transfers(balances):
    """
    Turn a balance map into the list of payments that settles it.

    Debtors go most negative first, creditors largest first. Both sorts are
    stable, so equal balances keep the map's order.
    """
    # [id, signed remaining balance]
    debtors = [[person, amount] for person, amount in balances.items() if amount < 0]
    creditors = [[person, amount] for person, amount in balances.items() if amount > 0]

    debtors.sort(key=lambda x: x[1])
    creditors.sort(key=lambda x: -x[1])

    # Match them up
    transfers = []
    i = 0
    j = 0

    while i < len(debtors) and j < len(creditors):
        debtor = debtors[i]
        creditor = creditors[j]

        owed = -debtor[1]
        credit = creditor[1]
        amount = min(owed, credit)

        if amount > EPSILON:
            transfers.append(Transfer(debtor[0], creditor[0], amount))

        if owed > credit:
            debtor[1] += credit
            j += 1
        elif owed < credit:
            creditor[1] -= owed
            i += 1
        else:
            i += 1
            j += 1

    return transfers
