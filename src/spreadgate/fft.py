def pru(n: int, p: int) -> int:
    # primitive n-th root of unity in GF(p), n must be a power of 2 dividing p - 1
    assert n & n - 1 == 0 and p - 1 & n - 1 == 0
    for z in range(2, p):
        if pow(z, (p - 1) // 2, p) != 1:  # z is a quadratic non-residue
            break
    return pow(z, (p - 1) // n, p)


def pows(a: int, n: int, p: int):
    r = 1
    for _ in range(n):
        yield r
        r = r * a % p


def fft(a: list[int], w: int, p: int) -> list[int]:
    # Iterative radix-2 number theoretic transform, returns [Σⱼ aⱼwʲᵏ for k in range(n)].
    n = len(a)
    a = list(a)
    j = 0
    for i in range(1, n):
        b = n >> 1
        while j & b:
            j ^= b
            b >>= 1
        j |= b
        if i < j:
            a[i], a[j] = a[j], a[i]
    m = 2
    while m <= n:
        h = m // 2
        t = pow(w, n // m, p)
        for s in range(0, n, m):
            k = 1
            for i in range(s, s + h):
                u, v = a[i], a[i + h] * k % p
                a[i], a[i + h] = (u + v) % p, (u - v) % p
                k = k * t % p
        m *= 2
    return a


def ifft(a: list[int], w: int, p: int) -> list[int]:
    m = pow(len(a), -1, p)
    return [x * m % p for x in fft(a, pow(w, -1, p), p)]
