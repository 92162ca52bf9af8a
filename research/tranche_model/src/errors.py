"""Custom errors for the tranche model"""

class ProtocolError(Exception):
    """Base error class for protocol errors"""
    pass

class FixedPointError(ProtocolError):
    """Base error for fixed point arithmetic failures"""
    pass

class DivisionByZeroError(FixedPointError):
    """Error for a zero supply or index used as a divisor"""
    pass

class ArithmeticOverflowError(FixedPointError):
    """Error for arithmetic overflow/underflow"""
    pass

class InvalidSupplyError(ProtocolError):
    """Error for a zero Senior supply passed to tier selection"""
    pass

class InvalidVaultValueError(ProtocolError):
    """Error for a zero Senior vault value passed to tier selection"""
    pass

class InvalidWithdrawalAmountError(ProtocolError):
    """Error for a zero withdrawal"""
    pass

class InvalidTierError(ProtocolError):
    """Error for an unknown yield tier id"""
    pass

class InvalidConfigError(ProtocolError):
    """Error for inconsistent protocol constants"""
    pass

class InvalidProfitBpsError(ProtocolError):
    """Error for a vault value mark outside the allowed bps range"""
    pass

class DepositCapExceededError(ProtocolError):
    """Error for a deposit that would push Senior supply over the cap"""
    pass

class RebaseTooSoonError(ProtocolError):
    """Error for a rebase triggered inside the minimum interval"""
    pass

class LedgerNotInitializedError(ProtocolError):
    """Error for operating on a ledger before its records exist"""
    pass
