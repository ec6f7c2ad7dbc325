# Feistel permutation over 256-bit blocks
# Scrambles a library index into the full private-key space and back

BLOCK_BITS = 256
HALF_BITS = 128

BLOCK_MASK = (1 << BLOCK_BITS) - 1
HALF_MASK = (1 << HALF_BITS) - 1

FEISTEL_ROUNDS = 10

# Published mixing constants, not a secret key
FEISTEL_KEYS = (
    314159265358979323846264338327950288419716939937510,
    271828182845904523536028747135266249775724709369995,
    141421356237309504880168872420969807856967187537694,
    161803398874989484820458683436563811772030917980576,
    173205080756887729352744634150587236694280525910297,
    223606797749978969640917366873127623544061835961153,
    112358132134558914423337761098715972584418167651094,
    271828182845904523536028747135266249775724709369995,
    314159265358979323846264338327950288419716939937510,
    161803398874989484820458683436563811772030917980576,
)


def feistel_round(right: int, k: int) -> int:
    """
    Round function: mixes the right half with a round constant.

    The whole expression is evaluated on unbounded integers and reduced
    mod 2^128 once at the end. The shifts see the full pre-reduction value.
    """
    return ((right ^ k) * (k | 1) + (right << 13) + (right >> 17)) & HALF_MASK


def _split(block: int):
    block &= BLOCK_MASK
    return block >> HALF_BITS, block & HALF_MASK


def _join(left: int, right: int) -> int:
    return (left << HALF_BITS) | right


class FeistelPermutation:
    """
    Balanced Feistel network used as a bijection on [0, 2^256).

    The round function itself is not invertible, but the network is: every
    round only XORs one half with a function of the other half.
    """

    def __init__(self, keys=FEISTEL_KEYS):
        if not keys:
            raise ValueError("at least one round constant is required")
        self._keys = tuple(int(k) for k in keys)

    @property
    def keys(self):
        return self._keys

    @property
    def rounds(self) -> int:
        return len(self._keys)

    def encrypt(self, index: int) -> int:
        """Map an index to a key. Inputs outside the block are reduced mod 2^256."""
        left, right = _split(index)
        for k in self._keys:
            left, right = right, left ^ feistel_round(right, k)
        return _join(left, right)

    def decrypt(self, key: int) -> int:
        """Exact inverse of encrypt: rounds are undone in reverse order."""
        left, right = _split(key)
        for k in reversed(self._keys):
            left, right = right ^ feistel_round(left, k), left
        return _join(left, right)


DEFAULT_PERMUTATION = FeistelPermutation()

feistel_encrypt = DEFAULT_PERMUTATION.encrypt
feistel_decrypt = DEFAULT_PERMUTATION.decrypt
